"""Query and lookup helpers shared by the record services."""

from __future__ import annotations

import enum
import uuid
from typing import TYPE_CHECKING, Any, TypeVar

from fastapi import HTTPException

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

T = TypeVar("T")
E = TypeVar("E", bound=enum.Enum)


def coerce_uuid(value):
    """Convert value to UUID, returning None if value is None."""
    if value is None:
        return None
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


def apply_ordering(query, order_by: str, order_dir: str, allowed_columns: dict):
    """Order ``query`` by one of ``allowed_columns``; 400 for anything else."""
    column = allowed_columns.get(order_by)
    if column is None:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid order_by. Allowed: {', '.join(sorted(allowed_columns))}",
        )
    return query.order_by(column.desc() if order_dir == "desc" else column.asc())


def apply_pagination(query, limit: int, offset: int):
    return query.limit(limit).offset(offset)


def list_payload(items: list[Any], limit: int, offset: int) -> dict:
    return {"items": items, "count": len(items), "limit": limit, "offset": offset}


def validate_enum(value, enum_cls: type[E], label: str) -> E | None:
    """Resolve a query-string value to a member of ``enum_cls``.

    Raises a 400 naming the accepted values when ``value`` is not one of them.
    """
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise HTTPException(
            status_code=400, detail=f"Invalid {label}. Allowed: {allowed}"
        ) from exc


def get_or_404(db: Session, model: type[T], id, detail: str | None = None, **options) -> T:
    """Load ``model`` by primary key or raise 404.

    Identifiers that are not valid UUIDs are treated as missing records.
    """
    missing = detail or f"{model.__name__} not found"
    try:
        key = coerce_uuid(id)
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=404, detail=missing) from exc
    entity = db.get(model, key, **options)
    if not entity:
        raise HTTPException(status_code=404, detail=missing)
    return entity
