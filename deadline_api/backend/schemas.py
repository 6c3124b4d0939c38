from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, validator

from deadline_api.backend.tools.timeutil import as_utc, to_utc_naive


def _required_text(v: Optional[str], message: str) -> str:
    if v is None or not v.strip():
        raise ValueError(message)
    return v.strip()


def _optional_text(v: Optional[str]) -> Optional[str]:
    return v.strip() if v is not None else v


# --- Requests ---

class DeadlineCreate(BaseModel):
    title: str = Field(..., max_length=200)
    description: Optional[str] = Field(None)
    deadline: datetime = Field(..., description="Cutoff instant; naive values are read as UTC")

    @validator("title")
    def validate_title(cls, v: str) -> str:
        return _required_text(v, "Please provide a deadline title")

    @validator("description")
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return _optional_text(v)

    @validator("deadline")
    def normalize_deadline(cls, v: datetime) -> datetime:
        return to_utc_naive(v)


class DeadlineUpdate(BaseModel):
    """Fields an admin may change on a deadline. Anything else is rejected."""

    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None)
    deadline: Optional[datetime] = Field(None)
    is_active: Optional[bool] = Field(None, alias="isActive")

    class Config:
        extra = "forbid"
        populate_by_name = True

    @validator("title")
    def validate_title(cls, v: Optional[str]) -> str:
        return _required_text(v, "Deadline title cannot be empty")

    @validator("description")
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return _optional_text(v)

    @validator("deadline")
    def normalize_deadline(cls, v: Optional[datetime]) -> datetime:
        if v is None:
            raise ValueError("Please provide a deadline date and time")
        return to_utc_naive(v)

    @validator("is_active")
    def validate_is_active(cls, v: Optional[bool]) -> bool:
        if v is None:
            raise ValueError("isActive cannot be null")
        return v

    def changes(self) -> Dict[str, Any]:
        return self.dict(exclude_unset=True)


class SubmissionCreate(BaseModel):
    title: str = Field(..., max_length=200)
    content: str = Field(...)
    deadline_id: str = Field(..., alias="deadlineId")

    class Config:
        populate_by_name = True

    @validator("title")
    def validate_title(cls, v: str) -> str:
        return _required_text(v, "Please provide a submission title")

    @validator("content")
    def validate_content(cls, v: str) -> str:
        return _required_text(v, "Please provide submission content")


class SubmissionUpdate(BaseModel):
    """Owners may only edit the title and content of a submission."""

    title: Optional[str] = Field(None, max_length=200)
    content: Optional[str] = Field(None)

    class Config:
        extra = "forbid"

    @validator("title")
    def validate_title(cls, v: Optional[str]) -> str:
        return _required_text(v, "Submission title cannot be empty")

    @validator("content")
    def validate_content(cls, v: Optional[str]) -> str:
        return _required_text(v, "Submission content cannot be empty")

    def changes(self) -> Dict[str, Any]:
        return self.dict(exclude_unset=True)


# --- Responses ---

class DeadlineOut(BaseModel):
    id: str
    title: str
    description: Optional[str]
    deadline: datetime
    is_active: bool = Field(..., alias="isActive")
    created_by: str = Field(..., alias="createdBy")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    class Config:
        from_attributes = True
        populate_by_name = True

    @validator("deadline", "created_at", "updated_at")
    def mark_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)


class DeadlineSummary(BaseModel):
    id: str
    title: str
    deadline: datetime

    @validator("deadline")
    def mark_utc(cls, v: datetime) -> datetime:
        return as_utc(v)


class SubmissionOut(BaseModel):
    id: str
    title: str
    content: str
    deadline_id: str = Field(..., alias="deadlineId")
    deadline: Optional[DeadlineSummary] = Field(None, description="Null once the deadline has been deleted")
    submitted_by: str = Field(..., alias="submittedBy")
    submitted_at: datetime = Field(..., alias="submittedAt")
    status: str

    class Config:
        populate_by_name = True

    @validator("submitted_at")
    def mark_utc(cls, v: datetime) -> datetime:
        return as_utc(v)


class SubmissionStats(BaseModel):
    total: int
    on_time: int = Field(..., alias="onTime")
    late: int

    class Config:
        populate_by_name = True


# --- Envelopes ---

class Envelope(BaseModel):
    success: bool = True
    message: Optional[str] = None


class DeadlineResponse(Envelope):
    data: DeadlineOut


class DeadlineListResponse(Envelope):
    count: int
    data: List[DeadlineOut]


class SubmissionResponse(Envelope):
    data: SubmissionOut


class SubmissionListResponse(Envelope):
    count: int
    data: List[SubmissionOut]


class StatsResponse(Envelope):
    data: SubmissionStats


class EmptyResponse(Envelope):
    data: Dict[str, Any] = Field(default_factory=dict)
