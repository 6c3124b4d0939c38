from datetime import datetime
from typing import List, Optional

import structlog
from sqlalchemy.orm import Session

from deadline_api.backend.errors import NotFoundError, ValidationError
from deadline_api.backend.schemas import DeadlineUpdate
from deadline_api.backend.services.audit import log_audit_event
from deadline_api.backend.tools import timeutil
from deadline_api.database import crud, models

log = structlog.get_logger()


def _require_future(value: datetime, now: datetime) -> None:
    if not timeutil.is_future(value, now):
        log.warning("deadline_not_in_future", deadline=value.isoformat(), now=now.isoformat())
        raise ValidationError("Deadline must be in the future")


def create_deadline(
    db: Session,
    *,
    title: str,
    description: Optional[str],
    deadline: datetime,
    caller_id: str,
) -> models.Deadline:
    now = timeutil.utcnow()
    deadline = timeutil.to_utc_naive(deadline)
    _require_future(deadline, now)

    record = crud.create_deadline(
        db, title=title, description=description, deadline=deadline, created_by=caller_id, created_at=now
    )
    log.info("deadline_created", deadline_id=record.id, cutoff=record.deadline.isoformat(), created_by=caller_id)
    log_audit_event("deadline_created", user_id=caller_id, deadline_id=record.id, metadata={"title": title})
    return record


def list_deadlines(db: Session) -> List[models.Deadline]:
    return crud.list_deadlines(db)


def list_active_deadlines(db: Session) -> List[models.Deadline]:
    """Active deadlines whose cutoff is still ahead, soonest first."""
    return crud.list_open_deadlines(db, now=timeutil.utcnow())


def get_deadline(db: Session, deadline_id: str) -> models.Deadline:
    record = crud.get_deadline(db, deadline_id=deadline_id)
    if not record:
        raise NotFoundError("Deadline not found")
    return record


def update_deadline(db: Session, deadline_id: str, patch: DeadlineUpdate, *, caller_id: Optional[str] = None) -> models.Deadline:
    record = get_deadline(db, deadline_id)
    now = timeutil.utcnow()

    changes = patch.changes()
    if "deadline" in changes:
        changes["deadline"] = timeutil.to_utc_naive(changes["deadline"])
        _require_future(changes["deadline"], now)

    record = crud.update_deadline(db, record=record, changes=changes, now=now)
    log.info("deadline_updated", deadline_id=deadline_id, fields=sorted(changes))
    log_audit_event("deadline_updated", user_id=caller_id, deadline_id=deadline_id, metadata={"fields": sorted(changes)})
    return record


def delete_deadline(db: Session, deadline_id: str, *, caller_id: Optional[str] = None) -> None:
    """Remove a deadline. Its submissions stay behind with a dangling reference."""
    record = get_deadline(db, deadline_id)
    crud.delete_deadline(db, record=record)
    log.info("deadline_deleted", deadline_id=deadline_id)
    log_audit_event("deadline_deleted", user_id=caller_id, deadline_id=deadline_id)


def toggle_deadline(db: Session, deadline_id: str, *, caller_id: Optional[str] = None) -> models.Deadline:
    record = get_deadline(db, deadline_id)
    record = crud.update_deadline(db, record=record, changes={"is_active": not record.is_active}, now=timeutil.utcnow())
    log.info("deadline_toggled", deadline_id=deadline_id, is_active=record.is_active)
    log_audit_event(
        "deadline_toggled", user_id=caller_id, deadline_id=deadline_id, metadata={"is_active": record.is_active}
    )
    return record
