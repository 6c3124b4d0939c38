"""Audit trail for deadline and submission mutations.

Every write performed by the services is appended to a daily JSON-lines file
(``audit_YYYY-MM-DD.jsonl``) under ``AUDIT_LOG_DIR``. Free text such as
submission content is never written verbatim: only a hash and a redacted,
truncated preview are kept.
"""
import hashlib
import json
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import structlog

from deadline_api.backend.tools import timeutil

log = structlog.get_logger()


PII_PATTERNS = {
    "email": r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b",
    "phone": r"\b(\+\d{1,2}\s?)?(\d{3}[-.\s]??\d{3}[-.\s]??\d{4}|\(\d{3}\)\s*\d{3}[-.\s]??\d{4})\b",
    "ssn": r"\b\d{3}-\d{2}-\d{4}\b",
}


def redact_pii(text: str) -> str:
    redacted = text
    for pii_type, pattern in PII_PATTERNS.items():
        redacted = re.sub(pattern, f"[{pii_type.upper()}_REDACTED]", redacted, flags=re.IGNORECASE)
    return redacted


def sanitize_for_logging(data: Any, max_length: int = 200) -> str:
    """Redact and truncate ``data`` so it can be written to the audit file."""
    text = data if isinstance(data, str) else json.dumps(data, default=str)
    redacted = redact_pii(text)
    if len(redacted) > max_length:
        redacted = redacted[:max_length] + "... [truncated]"
    return redacted


def audit_dir() -> Path:
    return Path(os.getenv("AUDIT_LOG_DIR", "audit_logs"))


def log_audit_event(
    event_type: str,
    user_id: Optional[str] = None,
    deadline_id: Optional[str] = None,
    submission_id: Optional[str] = None,
    content: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Append one audit record.

    Args:
        event_type: e.g. 'deadline_created', 'submission_deleted'
        user_id: Caller identity that performed the write
        deadline_id: Deadline the event concerns
        submission_id: Submission the event concerns, if any
        content: Free text to fingerprint (hashed and previewed, never stored whole)
        metadata: Additional context
    """
    now = timeutil.utcnow()
    record: Dict[str, Any] = {
        "timestamp": now.isoformat(),
        "event_type": event_type,
        "user_id": user_id,
        "deadline_id": deadline_id,
        "submission_id": submission_id,
        "metadata": metadata or {},
    }
    if content:
        record["content_hash"] = hashlib.sha256(content.encode()).hexdigest()[:16]
        record["content_preview"] = sanitize_for_logging(content)

    target = audit_dir()
    try:
        target.mkdir(parents=True, exist_ok=True)
        with open(target / f"audit_{now.strftime('%Y-%m-%d')}.jsonl", "a", encoding="utf-8") as f:
            f.write(json.dumps(record, default=str) + "\n")
    except OSError as exc:
        # The write already committed; a lost audit line must not turn it into a 500.
        log.error("audit_log_failed", event_type=event_type, error=str(exc))
        return

    log.info("audit_logged", event_type=event_type, deadline_id=deadline_id, submission_id=submission_id)
