"""Ordering of listings from a ``field:direction`` query string."""

from __future__ import annotations

from collections.abc import Collection

from sqlalchemy import asc, desc
from sqlalchemy.orm import Query

from reportpay.core.database import Base

SORT_DIRECTIONS = {"asc": asc, "desc": desc}


def parse_order_by(
    order_by: str | None,
    allowed_fields: Collection[str],
    default: tuple[str, str],
) -> tuple[str, str]:
    """Split ``"signed_at:asc"`` into a field and a direction.

    A field outside ``allowed_fields`` falls back to ``default`` entirely; a
    missing direction means ascending and an unknown one keeps the default
    direction.
    """
    if not order_by:
        return default
    field, _, direction = order_by.partition(":")
    field = field.strip()
    if field not in allowed_fields:
        return default
    direction = direction.strip().lower() or "asc"
    if direction not in SORT_DIRECTIONS:
        direction = default[1]
    return field, direction


def apply_order_by(
    query: Query,  # type: ignore[type-arg]
    model: type[Base],
    order_by: str | None,
    allowed_fields: Collection[str],
    default: tuple[str, str] = ("created_at", "desc"),
) -> Query:  # type: ignore[type-arg]
    """Order ``query`` by a whitelisted column.

    Ties are broken on the primary key in the same direction, so paging
    with offset and limit never skips or repeats a row.
    """
    field, direction = parse_order_by(order_by, allowed_fields, default)
    order_func = SORT_DIRECTIONS[direction]
    return query.order_by(order_func(getattr(model, field)), order_func(model.id))  # type: ignore[attr-defined]
