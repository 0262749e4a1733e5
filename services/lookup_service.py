"""
services.lookup_service - Idempotent lookup-or-insert by natural key.

Isolated so taxonomies, taxons, option types, option values, properties
and the shipping/tax categories all share one implementation instead of
each re-deriving the same "query, else add" pattern.
"""

from __future__ import annotations

from typing import Any, TypeVar

from sqlalchemy.orm import Session

T = TypeVar("T")


def find_or_create(
    session: Session,
    model: type[T],
    defaults: dict[str, Any] | None = None,
    **natural_key: Any,
) -> tuple[T, bool]:
    """
    Return ``(instance, created)`` for the row of *model* matching
    *natural_key*.  When no row matches, a new one is built from
    *natural_key* plus *defaults*, added and flushed so that the next
    lookup in the same session finds it.
    """
    obj = session.query(model).filter_by(**natural_key).order_by(model.id).first()
    if obj is not None:
        return obj, False

    attrs = dict(defaults or {})
    attrs.update(natural_key)
    obj = model(**attrs)
    session.add(obj)
    session.flush()
    return obj, True
