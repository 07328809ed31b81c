"""
Users API (super_admin): list, get, create, update, delete, toggle-status.
Own-profile reads and edits live under /auth/me.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.types import Role
from app.schemas.common import ApiResponse, Pagination, page_bounds
from app.schemas.user import UserCreateRequest, UserData, UserListData, UserResponse, UserUpdateRequest
from app.api.deps import get_current_actor
from app.services import users as user_service
from app.services.policy import Actor

router = APIRouter(prefix="/users", tags=["users"])


def _user_data(user) -> UserData:
    return UserData(user=UserResponse.model_validate(user))


@router.get("", response_model=ApiResponse[UserListData])
def list_users(
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
    role: Role | None = None,
    university_body_id: int | None = None,
    is_active: bool | None = None,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    page, limit, _ = page_bounds(page, limit)
    items, total = user_service.list_users(
        db,
        actor,
        page=page,
        limit=limit,
        search=search,
        role=role,
        university_body_id=university_body_id,
        is_active=is_active,
    )
    return ApiResponse(
        data=UserListData(
            users=[UserResponse.model_validate(u) for u in items],
            pagination=Pagination.build(page, limit, total),
        )
    )


@router.get("/{user_id}", response_model=ApiResponse[UserData])
def get_user(user_id: int, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return ApiResponse(data=_user_data(user_service.get_user(db, actor, user_id)))


@router.post("", response_model=ApiResponse[UserData], status_code=status.HTTP_201_CREATED)
def create_user(data: UserCreateRequest, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    user = user_service.create_user(db, actor, data)
    return ApiResponse(message="User created successfully", data=_user_data(user))


@router.put("/{user_id}", response_model=ApiResponse[UserData])
def update_user(
    user_id: int,
    data: UserUpdateRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    user = user_service.update_user(db, actor, user_id, data)
    return ApiResponse(message="User updated successfully", data=_user_data(user))


@router.delete("/{user_id}", response_model=ApiResponse[None])
def delete_user(user_id: int, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    user_service.delete_user(db, actor, user_id)
    return ApiResponse(message="User deleted successfully")


@router.put("/{user_id}/toggle-status", response_model=ApiResponse[UserData])
def toggle_user_status(user_id: int, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    """Activate or deactivate an account (never your own)."""
    user = user_service.toggle_status(db, actor, user_id)
    state = "activated" if user.is_active else "deactivated"
    return ApiResponse(message=f"User {state} successfully", data=_user_data(user))
