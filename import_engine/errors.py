"""
import_engine.errors - Exceptions raised by the import pipeline.

Only ImportFileError (and subclasses) aborts a run.  Row-level problems
are turned into ImportOutcome values by the engine.
"""


class ImportFileError(Exception):
    """The data file as a whole cannot be imported."""


class ParseError(ImportFileError):
    """The file cannot be opened or is not validly delimited text."""


class ColumnMapError(ImportFileError):
    """The column mapping does not fit the file being imported."""


class SettingsError(ValueError):
    """The import configuration is malformed."""


class RowError(Exception):
    """Raised when a row cannot be imported."""
