import json
from datetime import timedelta

from deadline_api.backend import services
from deadline_api.backend.services.audit import audit_dir, log_audit_event, sanitize_for_logging


def _records(clock):
    path = audit_dir() / f"audit_{clock.now.strftime('%Y-%m-%d')}.jsonl"
    return [json.loads(line) for line in path.read_text().splitlines()]


def test_sanitize_redacts_and_truncates():
    text = "contact me at jane@example.com " + "x" * 300
    cleaned = sanitize_for_logging(text, max_length=50)

    assert "jane@example.com" not in cleaned
    assert "[EMAIL_REDACTED]" in cleaned
    assert cleaned.endswith("... [truncated]")


def test_event_written_with_content_fingerprint(clock):
    log_audit_event("submission_created", user_id="u1", submission_id="s1", content="call 555-123-4567")

    record = _records(clock)[-1]
    assert record["event_type"] == "submission_created"
    assert record["user_id"] == "u1"
    assert len(record["content_hash"]) == 16
    assert "555-123-4567" not in record["content_preview"]


def test_service_writes_are_audited(db, clock):
    deadline = services.create_deadline(
        db, title="Quiz", description=None, deadline=clock.now + timedelta(hours=1), caller_id="admin-1"
    )
    services.create_submission(db, title="t", content="c", deadline_id=deadline.id, caller_id="u1")
    services.toggle_deadline(db, deadline.id, caller_id="admin-1")

    events = [r["event_type"] for r in _records(clock)]
    assert events == ["deadline_created", "submission_created", "deadline_toggled"]
