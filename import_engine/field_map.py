"""
import_engine.field_map - Logical field name ↔ column index mapping.

A ColumnMap is the declarative description of one file schema: the
engine only ever asks for logical fields ("Name", "Master Price" …) and
the map says which column holds them in this particular file.  Fields
missing from the map are simply not present in the file.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Iterator, Mapping, Sequence

from import_engine.errors import ColumnMapError, RowError


class _Absent:
    """Marker for a logical field that is not mapped for this file."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()


class ColumnMap:

    def __init__(self, mapping: Mapping[str, int]):
        self._mapping: dict[str, int] = dict(mapping)

    def __contains__(self, field: str) -> bool:
        return field in self._mapping

    def __iter__(self) -> Iterator[str]:
        return iter(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    def __repr__(self) -> str:
        return f"ColumnMap({self._mapping!r})"

    def index(self, field: str) -> int | None:
        return self._mapping.get(field)

    def validate(self, width: int | None = None) -> None:
        """
        Check every index is a non-negative int and, when *width* (the
        file's column count) is known, that it points inside the file.
        """
        for field, idx in self._mapping.items():
            if isinstance(idx, bool) or not isinstance(idx, int) or idx < 0:
                raise ColumnMapError(
                    f"Column for '{field}' must be a non-negative integer, got {idx!r}"
                )
            if width is not None and idx >= width:
                raise ColumnMapError(
                    f"Column {idx} for '{field}' is beyond the file's "
                    f"{width} column(s)"
                )

    def value(self, row: Sequence[str], field: str):
        """
        Return the raw string for *field* in *row*, or ABSENT when the
        field is not mapped.  A mapped column past the end of a short
        row raises RowError.
        """
        idx = self._mapping.get(field)
        if idx is None:
            return ABSENT
        if idx >= len(row):
            raise RowError(
                f"Row has {len(row)} column(s) but '{field}' is mapped to column {idx}"
            )
        return row[idx] if row[idx] is not None else ""

    def text(self, row: Sequence[str], field: str):
        """Stripped string value, "" when mapped but blank, ABSENT when unmapped."""
        raw = self.value(row, field)
        if raw is ABSENT:
            return ABSENT
        return raw.strip()

    def values(self, row: Sequence[str]) -> dict[str, str]:
        """Every mapped field that the row actually reaches, keyed by logical name."""
        return {
            field: (row[idx] or "").strip()
            for field, idx in self._mapping.items()
            if idx < len(row)
        }


_DECIMAL_COMMA = re.compile(r"[-+]?\d+,\d{1,2}")


def parse_decimal(raw: str) -> Decimal | None:
    """
    Parse a numeric cell.  Blank → 0.0; a single decimal comma with one or
    two digits after it ("10,50") is accepted; thousands separators
    ("1,234") and anything else unparseable → None.
    """
    raw = (raw or "").strip()
    if not raw:
        return Decimal("0.0")
    if _DECIMAL_COMMA.fullmatch(raw):
        raw = raw.replace(",", ".")
    try:
        val = Decimal(raw)
    except InvalidOperation:
        return None
    return val if val.is_finite() else None
