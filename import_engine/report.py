"""
import_engine.report - Structured result of a product import run.

The overall status is always one of two fixed notices; the per-row
outcomes are the audit trail.
"""

from __future__ import annotations

from dataclasses import dataclass, field

CREATED = "created"
UPDATED = "updated"
SKIPPED_INVALID = "skipped_invalid"
FAILED = "failed"

NOTICE = "notice"
ERROR = "error"

SUCCESS_MESSAGE = "Product data was successfully imported."
FAILURE_MESSAGE = (
    "The file data could not be imported. Please check that the "
    "spreadsheet is a CSV file, and is correctly formatted."
)


@dataclass
class ImportOutcome:
    row: int
    status: str
    message: str = ""
    product_id: int | None = None

    def to_dict(self) -> dict:
        return {
            "row": self.row,
            "status": self.status,
            "message": self.message,
            "product_id": self.product_id,
        }


@dataclass
class ImportReport:
    status: str = NOTICE
    message: str = SUCCESS_MESSAGE
    detail: str = ""                     # fatal error text, when status == error
    outcomes: list[ImportOutcome] = field(default_factory=list)
    destroyed: int = 0

    def fail(self, detail: str) -> None:
        self.status = ERROR
        self.message = FAILURE_MESSAGE
        self.detail = detail

    @property
    def ok(self) -> bool:
        return self.status == NOTICE

    def count(self, status: str) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def total_rows(self) -> int:
        return len(self.outcomes)

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "message": self.message,
            "detail": self.detail,
            "total_rows": self.total_rows,
            "created": self.count(CREATED),
            "updated": self.count(UPDATED),
            "skipped": self.count(SKIPPED_INVALID),
            "failed": self.count(FAILED),
            "destroyed": self.destroyed,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }
