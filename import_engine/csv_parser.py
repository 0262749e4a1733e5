"""
import_engine.csv_parser - Low-level delimited-file reading.

Responsibilities:
  • configurable delimiter / encoding
  • BOM removal (UTF-8 / UTF-8-SIG)
  • skipping a fixed number of leading (header) rows
  • lazy, one-pass iteration over raw rows (lists of strings)

Blank rows are passed through untouched; deciding what to do with them
is the caller's job.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterator

from import_engine.errors import ParseError

RawRow = list[str]


class RowReader:
    """
    Iterate over the data rows of a delimited file.

    Each item is ``(line_number, row)`` where *line_number* is the
    1-based record number in the file (header rows included), so it can
    be quoted back to whoever prepared the spreadsheet.
    """

    def __init__(
        self,
        path: str | Path,
        delimiter: str = ",",
        skip: int = 0,
        encoding: str = "utf-8",
    ):
        if not isinstance(delimiter, str) or len(delimiter) != 1:
            raise ValueError(f"Delimiter must be a single character, got {delimiter!r}")
        if skip < 0:
            raise ValueError(f"Rows to skip must be >= 0, got {skip}")
        self.path = Path(path)
        self.delimiter = delimiter
        self.skip = skip
        self.encoding = encoding

    def __iter__(self) -> Iterator[tuple[int, RawRow]]:
        for line_no, row in self._records():
            if line_no > self.skip:
                yield line_no, row

    def width(self) -> int:
        """Column count of the first record (the header row, when there is one)."""
        for _line_no, row in self._records():
            return len(row)
        raise ParseError(f"{self.path.name} is empty")

    def _records(self) -> Iterator[tuple[int, RawRow]]:
        try:
            fh = open(self.path, newline="", encoding=self.encoding)
        except OSError as exc:
            raise ParseError(f"Cannot open {self.path}: {exc}") from exc

        with fh:
            reader = csv.reader(fh, delimiter=self.delimiter, strict=True)
            try:
                for line_no, row in enumerate(reader, start=1):
                    if line_no == 1 and row and row[0].startswith("\ufeff"):
                        row[0] = row[0][1:]
                    yield line_no, row
            except csv.Error as exc:
                raise ParseError(
                    f"{self.path.name} line {reader.line_num}: {exc}"
                ) from exc
            except UnicodeDecodeError as exc:
                raise ParseError(
                    f"{self.path.name} is not valid {self.encoding} text: {exc}"
                ) from exc
