"""Custom exception hierarchy for metastock-catalog."""

from typing import Any


class MetastockCatalogError(Exception):
    """Base exception for all metastock-catalog errors.

    All exceptions carry an optional `context` dict for structured error
    metadata that can be logged or serialized without parsing the message.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigurationError(MetastockCatalogError):
    """Invalid configuration, format specification, or filter argument.

    Policy: report immediately. Aborts the requested operation only.

    Context keys:
        field: str - the setting that failed validation
        value: Any - the rejected value
    """


class BadFormatError(ConfigurationError):
    """Field selection is meaningless for the requested report.

    Context keys:
        mode: str - "catalog" or "combined"
    """


class InvalidFormatTokenError(ConfigurationError):
    """A format specification token names no known field.

    Context keys:
        token: str - the offending token as written
    """


class SourceDataError(MetastockCatalogError):
    """Index or quote data cannot support the requested operation.

    Policy: abort the catalog build or the specific report.

    Context keys:
        identifier: int - the file number involved, if any
    """


class NotReferencedError(SourceDataError):
    """Identifier is not referenced by any index file.

    Context keys:
        identifier: int - the requested file number
    """


class NoQuoteFileError(SourceDataError):
    """A selected catalog entry has no companion quote file.

    Context keys:
        identifier: int - the file number without data
    """


class DataIOError(MetastockCatalogError):
    """Opening, reading, or stat-ing a file failed.

    Policy: abort the operation that triggered it. Never retried.

    Context keys:
        path: str - the file or directory involved
    """


class InternalInconsistencyError(MetastockCatalogError):
    """Index data violates a reconciliation invariant (duplicate assignment).

    Policy: raise immediately. Never skip the record and continue.

    Context keys:
        identifier: int - the slot involved
        source: str - the index source being applied
        previous_source: str | None - the source that assigned the slot
    """


class WriteInterruptedError(MetastockCatalogError):
    """The output consumer went away while a report was being written.

    Policy: stop writing. Not a data-integrity problem.

    Context keys:
        identifier: int - the entry being written, if any
    """
