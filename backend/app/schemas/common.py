"""
Response envelope and shared summaries. Every JSON response is {success, data?, message?}.
"""
import math
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str | None = None
    data: T | None = None


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_items=total,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )


class UserSummary(BaseModel):
    id: int
    first_name: str | None = None
    last_name: str | None = None

    class Config:
        from_attributes = True


class BodySummary(BaseModel):
    id: int
    name: str
    type: str

    class Config:
        from_attributes = True


def page_bounds(page: int, limit: int, max_limit: int = 100) -> tuple[int, int, int]:
    """Clamp page/limit; return (page, limit, offset)."""
    page = max(1, page)
    limit = min(max(1, limit), max_limit)
    return page, limit, (page - 1) * limit


def contains_pattern(text: str) -> str:
    """LIKE pattern matching `text` literally, with backslash as the escape character."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
