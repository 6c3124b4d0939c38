"""Submission workflow: deadline-gated create, owner-only edits, statistics.

Gating order on create is fixed: the deadline must exist, be active, and not
be past its cutoff before the duplicate check runs. Edits and deletes close at
the cutoff regardless of the submission's stored status.
"""
import os
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from deadline_api.backend.auth import ROLE_ADMIN
from deadline_api.backend.errors import (
    ConflictError,
    DeadlinePassedError,
    ForbiddenError,
    NotFoundError,
    StateError,
)
from deadline_api.backend.schemas import SubmissionUpdate
from deadline_api.backend.services.audit import log_audit_event
from deadline_api.backend.tools import timeutil
from deadline_api.database import crud, models

log = structlog.get_logger()


def parse_grace_seconds(raw: str) -> int:
    """Window after the cutoff in which new submissions are still taken, marked late."""
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"LATE_GRACE_SECONDS must be a whole number of seconds, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"LATE_GRACE_SECONDS cannot be negative, got {value}")
    return value


LATE_GRACE_SECONDS = parse_grace_seconds(os.getenv("LATE_GRACE_SECONDS", "0"))


def deadline_info(cutoff: datetime, now: datetime) -> Dict[str, Any]:
    elapsed = timeutil.seconds_past(cutoff, now)
    return {
        "deadline": timeutil.as_utc(cutoff).isoformat(),
        "currentTime": timeutil.as_utc(now).isoformat(),
        "secondsPastDeadline": elapsed,
        "timePassed": f"{elapsed} seconds past deadline",
    }


def to_view(submission: models.Submission, deadline: Optional[models.Deadline]) -> Dict[str, Any]:
    return {
        "id": submission.id,
        "title": submission.title,
        "content": submission.content,
        "deadline_id": submission.deadline_id,
        "deadline": (
            {"id": deadline.id, "title": deadline.title, "deadline": deadline.deadline} if deadline else None
        ),
        "submitted_by": submission.submitted_by,
        "submitted_at": submission.submitted_at,
        "status": submission.status,
    }


def attach_deadlines(db: Session, submissions: List[models.Submission]) -> List[Dict[str, Any]]:
    deadlines = crud.get_deadlines_by_ids(db, deadline_ids=[s.deadline_id for s in submissions])
    return [to_view(s, deadlines.get(s.deadline_id)) for s in submissions]


def _classify(deadline: models.Deadline, now: datetime) -> str:
    if not deadline.is_passed(now):
        return models.STATUS_ON_TIME

    if LATE_GRACE_SECONDS and now <= deadline.deadline + timedelta(seconds=LATE_GRACE_SECONDS):
        return models.STATUS_LATE

    info = deadline_info(deadline.deadline, now)
    log.warning("submission_rejected_deadline_passed", deadline_id=deadline.id, **info)
    raise DeadlinePassedError(
        "Submission deadline has passed. Late submissions are not accepted.",
        extra={"deadlineInfo": info},
    )


def create_submission(
    db: Session,
    *,
    title: str,
    content: str,
    deadline_id: str,
    caller_id: str,
) -> Dict[str, Any]:
    deadline = crud.get_deadline(db, deadline_id=deadline_id)
    if not deadline:
        raise NotFoundError("Deadline not found")

    if not deadline.is_active:
        raise StateError("This deadline is not active for submissions")

    now = timeutil.utcnow()
    status = _classify(deadline, now)

    if crud.find_submission(db, deadline_id=deadline_id, submitted_by=caller_id):
        raise ConflictError("You have already submitted for this deadline")

    try:
        submission = crud.create_submission(
            db,
            title=title,
            content=content,
            deadline_id=deadline_id,
            submitted_by=caller_id,
            submitted_at=now,
            status=status,
        )
    except IntegrityError:
        # A concurrent request won the (deadline, user) unique constraint.
        log.warning("submission_duplicate_race", deadline_id=deadline_id, user_id=caller_id)
        raise ConflictError("You have already submitted for this deadline")

    log.info("submission_created", submission_id=submission.id, deadline_id=deadline_id, status=status)
    log_audit_event(
        "submission_created",
        user_id=caller_id,
        deadline_id=deadline_id,
        submission_id=submission.id,
        content=content,
        metadata={"status": status},
    )
    return to_view(submission, deadline)


def list_submissions(db: Session) -> List[Dict[str, Any]]:
    return attach_deadlines(db, crud.list_submissions(db))


def list_submissions_for_deadline(db: Session, deadline_id: str) -> List[Dict[str, Any]]:
    return attach_deadlines(db, crud.list_submissions(db, deadline_id=deadline_id))


def list_my_submissions(db: Session, caller_id: str) -> List[Dict[str, Any]]:
    return attach_deadlines(db, crud.list_submissions(db, submitted_by=caller_id))


def _get(db: Session, sub_id: str) -> models.Submission:
    submission = crud.get_submission(db, sub_id=sub_id)
    if not submission:
        raise NotFoundError("Submission not found")
    return submission


def get_submission(db: Session, sub_id: str, *, caller_id: str, caller_role: str) -> Dict[str, Any]:
    submission = _get(db, sub_id)
    if caller_role != ROLE_ADMIN and submission.submitted_by != caller_id:
        raise ForbiddenError("Not authorized to view this submission")
    return to_view(submission, crud.get_deadline(db, deadline_id=submission.deadline_id))


def _writable(db: Session, sub_id: str, caller_id: str, action: str):
    """Load a submission for ``action`` after the ownership and cutoff checks."""
    submission = _get(db, sub_id)
    if submission.submitted_by != caller_id:
        log.warning("submission_write_forbidden", submission_id=sub_id, user_id=caller_id, action=action)
        raise ForbiddenError(f"Not authorized to {action} this submission")

    deadline = crud.get_deadline(db, deadline_id=submission.deadline_id)
    if not deadline:
        raise NotFoundError("Deadline not found")

    now = timeutil.utcnow()
    if deadline.is_passed(now):
        info = deadline_info(deadline.deadline, now)
        log.warning("submission_frozen", submission_id=sub_id, action=action, **info)
        raise DeadlinePassedError(
            f"Cannot {action} submission after deadline has passed",
            extra={"deadlineInfo": info},
        )
    return submission, deadline


def update_submission(db: Session, sub_id: str, patch: SubmissionUpdate, *, caller_id: str) -> Dict[str, Any]:
    submission, deadline = _writable(db, sub_id, caller_id, "update")

    changes = patch.changes()
    submission = crud.update_submission(db, submission=submission, changes=changes)
    log.info("submission_updated", submission_id=sub_id, fields=sorted(changes))
    log_audit_event(
        "submission_updated",
        user_id=caller_id,
        deadline_id=deadline.id,
        submission_id=sub_id,
        content=changes.get("content"),
        metadata={"fields": sorted(changes)},
    )
    return to_view(submission, deadline)


def delete_submission(db: Session, sub_id: str, *, caller_id: str) -> None:
    submission, deadline = _writable(db, sub_id, caller_id, "delete")
    crud.delete_submission(db, submission=submission)
    log.info("submission_deleted", submission_id=sub_id)
    log_audit_event("submission_deleted", user_id=caller_id, deadline_id=deadline.id, submission_id=sub_id)


def submission_stats(db: Session, deadline_id: str) -> Dict[str, int]:
    return {
        "total": crud.count_submissions(db, deadline_id=deadline_id),
        "on_time": crud.count_submissions(db, deadline_id=deadline_id, status=models.STATUS_ON_TIME),
        "late": crud.count_submissions(db, deadline_id=deadline_id, status=models.STATUS_LATE),
    }
