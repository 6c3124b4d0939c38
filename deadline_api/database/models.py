import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, String, Text, Index, UniqueConstraint

from deadline_api.backend.tools.timeutil import utcnow
from .db import Base

STATUS_ON_TIME = "on-time"
STATUS_LATE = "late"
SUBMISSION_STATUSES = (STATUS_ON_TIME, STATUS_LATE)


def _new_id() -> str:
    return str(uuid.uuid4())


class Deadline(Base):
    __tablename__ = "deadlines"

    id = Column(String(36), primary_key=True, index=True, default=_new_id)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    deadline = Column(DateTime, nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(String(64), nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def is_passed(self, now: datetime) -> bool:
        return now > self.deadline

    def __repr__(self):
        return f"<Deadline(id={self.id}, deadline={self.deadline}, active={self.is_active})>"


class Submission(Base):
    __tablename__ = "submissions"
    __table_args__ = (UniqueConstraint("deadline_id", "submitted_by", name="uq_submission_deadline_user"),)

    id = Column(String(36), primary_key=True, index=True, default=_new_id)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    # Plain reference: deleting a deadline leaves its submissions in place.
    deadline_id = Column(String(36), nullable=False, index=True)
    submitted_by = Column(String(64), nullable=False, index=True)
    submitted_at = Column(DateTime, default=utcnow)
    status = Column(String(20), nullable=False, default=STATUS_ON_TIME)

    def __repr__(self):
        return f"<Submission(id={self.id}, deadline_id={self.deadline_id}, status={self.status})>"


Index("idx_submissions_deadline_status", Submission.deadline_id, Submission.status)
