from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from deadline_api.backend import services
from deadline_api.backend.auth import ROLE_ADMIN, ROLE_USER, Caller, get_caller, require_roles
from deadline_api.backend.schemas import (
    EmptyResponse,
    StatsResponse,
    SubmissionCreate,
    SubmissionListResponse,
    SubmissionResponse,
    SubmissionUpdate,
)
from deadline_api.database.db import get_db

router = APIRouter(prefix="/api/submissions", tags=["submissions"])

submitters = require_roles(ROLE_USER, ROLE_ADMIN)
admins = require_roles(ROLE_ADMIN)


@router.post("", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
def create_submission(
    payload: SubmissionCreate,
    caller: Caller = Depends(submitters),
    db: Session = Depends(get_db),
):
    view = services.create_submission(
        db,
        title=payload.title,
        content=payload.content,
        deadline_id=payload.deadline_id,
        caller_id=caller.id,
    )
    return {"success": True, "message": "Submission created successfully", "data": view}


@router.get("/my", response_model=SubmissionListResponse)
def list_my_submissions(caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    views = services.list_my_submissions(db, caller.id)
    return {"success": True, "count": len(views), "data": views}


@router.get("/deadline/{deadline_id}", response_model=SubmissionListResponse)
def list_submissions_for_deadline(deadline_id: str, _: Caller = Depends(admins), db: Session = Depends(get_db)):
    views = services.list_submissions_for_deadline(db, deadline_id)
    return {"success": True, "count": len(views), "data": views}


@router.get("/stats/{deadline_id}", response_model=StatsResponse)
def submission_stats(deadline_id: str, _: Caller = Depends(admins), db: Session = Depends(get_db)):
    return {"success": True, "data": services.submission_stats(db, deadline_id)}


@router.get("", response_model=SubmissionListResponse)
def list_submissions(_: Caller = Depends(admins), db: Session = Depends(get_db)):
    views = services.list_submissions(db)
    return {"success": True, "count": len(views), "data": views}


@router.get("/{sub_id}", response_model=SubmissionResponse)
def get_submission(sub_id: str, caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    view = services.get_submission(db, sub_id, caller_id=caller.id, caller_role=caller.role)
    return {"success": True, "data": view}


@router.put("/{sub_id}", response_model=SubmissionResponse)
def update_submission(
    sub_id: str,
    patch: SubmissionUpdate,
    caller: Caller = Depends(submitters),
    db: Session = Depends(get_db),
):
    view = services.update_submission(db, sub_id, patch, caller_id=caller.id)
    return {"success": True, "message": "Submission updated successfully", "data": view}


@router.delete("/{sub_id}", response_model=EmptyResponse)
def delete_submission(sub_id: str, caller: Caller = Depends(submitters), db: Session = Depends(get_db)):
    services.delete_submission(db, sub_id, caller_id=caller.id)
    return {"success": True, "message": "Submission deleted successfully", "data": {}}
