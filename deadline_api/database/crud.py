from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import models


# --- Deadlines ---

def create_deadline(
    db: Session,
    *,
    title: str,
    description: Optional[str],
    deadline: datetime,
    created_by: str,
    created_at: datetime,
) -> models.Deadline:
    record = models.Deadline(
        title=title,
        description=description,
        deadline=deadline,
        is_active=True,
        created_by=created_by,
        created_at=created_at,
        updated_at=created_at,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def get_deadline(db: Session, *, deadline_id: str) -> Optional[models.Deadline]:
    return db.query(models.Deadline).filter(models.Deadline.id == deadline_id).first()


def get_deadlines_by_ids(db: Session, *, deadline_ids: List[str]) -> Dict[str, models.Deadline]:
    if not deadline_ids:
        return {}
    rows = db.query(models.Deadline).filter(models.Deadline.id.in_(set(deadline_ids))).all()
    return {row.id: row for row in rows}


def list_deadlines(db: Session) -> List[models.Deadline]:
    return db.query(models.Deadline).order_by(models.Deadline.created_at.desc()).all()


def list_open_deadlines(db: Session, *, now: datetime) -> List[models.Deadline]:
    return (
        db.query(models.Deadline)
        .filter(models.Deadline.is_active.is_(True), models.Deadline.deadline > now)
        .order_by(models.Deadline.deadline.asc())
        .all()
    )


def update_deadline(db: Session, *, record: models.Deadline, changes: Dict[str, Any], now: datetime) -> models.Deadline:
    for field, value in changes.items():
        setattr(record, field, value)
    record.updated_at = now
    db.commit()
    db.refresh(record)
    return record


def delete_deadline(db: Session, *, record: models.Deadline) -> None:
    db.delete(record)
    db.commit()


# --- Submissions ---

def create_submission(
    db: Session,
    *,
    title: str,
    content: str,
    deadline_id: str,
    submitted_by: str,
    submitted_at: datetime,
    status: str = models.STATUS_ON_TIME,
) -> models.Submission:
    submission = models.Submission(
        title=title,
        content=content,
        deadline_id=deadline_id,
        submitted_by=submitted_by,
        submitted_at=submitted_at,
        status=status,
    )
    db.add(submission)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(submission)
    return submission


def get_submission(db: Session, *, sub_id: str) -> Optional[models.Submission]:
    return db.query(models.Submission).filter(models.Submission.id == sub_id).first()


def find_submission(db: Session, *, deadline_id: str, submitted_by: str) -> Optional[models.Submission]:
    return (
        db.query(models.Submission)
        .filter(models.Submission.deadline_id == deadline_id, models.Submission.submitted_by == submitted_by)
        .first()
    )


def list_submissions(
    db: Session,
    *,
    deadline_id: Optional[str] = None,
    submitted_by: Optional[str] = None,
) -> List[models.Submission]:
    query = db.query(models.Submission)
    if deadline_id is not None:
        query = query.filter(models.Submission.deadline_id == deadline_id)
    if submitted_by is not None:
        query = query.filter(models.Submission.submitted_by == submitted_by)
    return query.order_by(models.Submission.submitted_at.desc()).all()


def count_submissions(db: Session, *, deadline_id: str, status: Optional[str] = None) -> int:
    query = db.query(models.Submission).filter(models.Submission.deadline_id == deadline_id)
    if status is not None:
        query = query.filter(models.Submission.status == status)
    return query.count()


def update_submission(db: Session, *, submission: models.Submission, changes: Dict[str, Any]) -> models.Submission:
    for field, value in changes.items():
        setattr(submission, field, value)
    db.commit()
    db.refresh(submission)
    return submission


def delete_submission(db: Session, *, submission: models.Submission) -> None:
    db.delete(submission)
    db.commit()
