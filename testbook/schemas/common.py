"""
Response envelopes and pagination shared by every route.
"""

import math
from typing import Generic, Iterable, List, Optional, TypeVar

from fastapi import Query
from pydantic import BaseModel

from testbook.core.config import settings

T = TypeVar("T")


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationMeta":
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class DataResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T


class PageResponse(BaseModel, Generic[T]):
    success: bool = True
    data: List[T]
    meta: PaginationMeta


class PageParams:
    """Query dependency for `page` / `limit`, clamping limit to the configured maximum"""

    def __init__(
        self,
        page: int = Query(1, ge=1, description="1-based page number"),
        limit: Optional[int] = Query(None, ge=1, description="Page size"),
    ):
        self.page = page
        self.limit = min(limit or settings.default_page_size, settings.max_page_size)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def meta(self, total: int) -> PaginationMeta:
        return PaginationMeta.build(self.page, self.limit, total)


class MessageData(BaseModel):
    message: str


def changed_fields(model: BaseModel, nullable: Iterable[str] = (), mode: str = "python") -> dict:
    """
    Fields the client actually sent. An explicit null is kept only for
    columns listed in `nullable`; for the rest it means "leave unchanged".
    """
    nullable = set(nullable)
    return {
        key: value
        for key, value in model.model_dump(mode=mode, exclude_unset=True).items()
        if value is not None or key in nullable
    }
