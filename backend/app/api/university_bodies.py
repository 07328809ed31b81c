"""
University bodies API: public listing and lookup; create/update/delete for super_admin.
"""
from typing import Literal

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.types import BodyType
from app.schemas.common import ApiResponse, Pagination, page_bounds
from app.schemas.university_body import (
    UniversityBodyCreateRequest,
    UniversityBodyData,
    UniversityBodyListData,
    UniversityBodyPublicData,
    UniversityBodyPublicResponse,
    UniversityBodyResponse,
    UniversityBodyTypesData,
    UniversityBodyUpdateRequest,
)
from app.api.deps import get_current_actor
from app.services import university_bodies as body_service
from app.services.policy import Actor

router = APIRouter(prefix="/university-bodies", tags=["university-bodies"])


@router.get("", response_model=ApiResponse[UniversityBodyListData])
def list_university_bodies(
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
    type: BodyType | None = None,
    is_active: Literal["true", "false", "all"] = "true",
    db: Session = Depends(get_db),
):
    """Public listing; active bodies by default (is_active=all for every body)."""
    page, limit, _ = page_bounds(page, limit)
    active = None if is_active == "all" else is_active == "true"
    items, total = body_service.list_bodies(
        db, page=page, limit=limit, search=search, body_type=type, is_active=active
    )
    return ApiResponse(
        data=UniversityBodyListData(
            university_bodies=[UniversityBodyPublicResponse.model_validate(b) for b in items],
            pagination=Pagination.build(page, limit, total),
        )
    )


@router.get("/types", response_model=ApiResponse[UniversityBodyTypesData])
def list_types():
    return ApiResponse(data=UniversityBodyTypesData(types=[t.value for t in BodyType]))


@router.get("/{body_id}", response_model=ApiResponse[UniversityBodyPublicData])
def get_university_body(body_id: int, db: Session = Depends(get_db)):
    body = body_service.get_body(db, body_id)
    return ApiResponse(data=UniversityBodyPublicData(university_body=UniversityBodyPublicResponse.model_validate(body)))


@router.post("", response_model=ApiResponse[UniversityBodyData], status_code=status.HTTP_201_CREATED)
def create_university_body(
    data: UniversityBodyCreateRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    body = body_service.create_body(db, actor, data)
    return ApiResponse(
        message="University body created successfully",
        data=UniversityBodyData(university_body=UniversityBodyResponse.model_validate(body)),
    )


@router.put("/{body_id}", response_model=ApiResponse[UniversityBodyData])
def update_university_body(
    body_id: int,
    data: UniversityBodyUpdateRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    body = body_service.update_body(db, actor, body_id, data)
    return ApiResponse(
        message="University body updated successfully",
        data=UniversityBodyData(university_body=UniversityBodyResponse.model_validate(body)),
    )


@router.delete("/{body_id}", response_model=ApiResponse[None])
def delete_university_body(
    body_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """Delete a body; its documents and members are kept with the reference cleared."""
    body_service.delete_body(db, actor, body_id)
    return ApiResponse(message="University body deleted successfully")
