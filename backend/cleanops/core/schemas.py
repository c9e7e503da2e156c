import math
from datetime import datetime, timezone
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

# ======================================================
# Schémas communs
# ======================================================

class PaginatedResponse(BaseModel, Generic[T]):
    """Enveloppe de pagination commune (page/limit)."""
    items: List[T]
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def build(cls, items: List[T], total: int, page: int, limit: int) -> "PaginatedResponse[T]":
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(items=items, total=total, page=page, limit=limit, total_pages=total_pages)


def utcnow() -> datetime:
    """Horodatage UTC courant (naïf, comme stocké en base)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convertit une date avec fuseau en UTC naïf; les dates naïves sont supposées UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
