from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from deadline_api.backend import services
from deadline_api.backend.auth import ROLE_ADMIN, Caller, get_caller, require_roles
from deadline_api.backend.schemas import (
    DeadlineCreate,
    DeadlineListResponse,
    DeadlineResponse,
    DeadlineUpdate,
    EmptyResponse,
)
from deadline_api.database.db import get_db

router = APIRouter(prefix="/api/deadlines", tags=["deadlines"])


@router.post("", response_model=DeadlineResponse, status_code=status.HTTP_201_CREATED)
def create_deadline(
    payload: DeadlineCreate,
    caller: Caller = Depends(require_roles(ROLE_ADMIN)),
    db: Session = Depends(get_db),
):
    record = services.create_deadline(
        db,
        title=payload.title,
        description=payload.description,
        deadline=payload.deadline,
        caller_id=caller.id,
    )
    return {"success": True, "message": "Deadline created successfully", "data": record}


@router.get("", response_model=DeadlineListResponse)
def list_deadlines(_: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    records = services.list_deadlines(db)
    return {"success": True, "count": len(records), "data": records}


@router.get("/active", response_model=DeadlineListResponse)
def list_active_deadlines(_: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    records = services.list_active_deadlines(db)
    return {"success": True, "count": len(records), "data": records}


@router.get("/{deadline_id}", response_model=DeadlineResponse)
def get_deadline(deadline_id: str, _: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    return {"success": True, "data": services.get_deadline(db, deadline_id)}


@router.put("/{deadline_id}", response_model=DeadlineResponse)
def update_deadline(
    deadline_id: str,
    patch: DeadlineUpdate,
    caller: Caller = Depends(require_roles(ROLE_ADMIN)),
    db: Session = Depends(get_db),
):
    record = services.update_deadline(db, deadline_id, patch, caller_id=caller.id)
    return {"success": True, "message": "Deadline updated successfully", "data": record}


@router.delete("/{deadline_id}", response_model=EmptyResponse)
def delete_deadline(
    deadline_id: str,
    caller: Caller = Depends(require_roles(ROLE_ADMIN)),
    db: Session = Depends(get_db),
):
    services.delete_deadline(db, deadline_id, caller_id=caller.id)
    return {"success": True, "message": "Deadline deleted successfully", "data": {}}


@router.patch("/{deadline_id}/toggle", response_model=DeadlineResponse)
def toggle_deadline(
    deadline_id: str,
    caller: Caller = Depends(require_roles(ROLE_ADMIN)),
    db: Session = Depends(get_db),
):
    record = services.toggle_deadline(db, deadline_id, caller_id=caller.id)
    state = "activated" if record.is_active else "deactivated"
    return {"success": True, "message": f"Deadline {state} successfully", "data": record}
