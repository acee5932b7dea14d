"""metastock_catalog.core: Foundation types, config, errors, and reporting."""

from metastock_catalog.core.config import (
    CatalogConfig,
    DecodersConfig,
    FilterConfig,
    LoggingConfig,
    OutputConfig,
    load_config,
)
from metastock_catalog.core.exceptions import (
    BadFormatError,
    ConfigurationError,
    DataIOError,
    InternalInconsistencyError,
    InvalidFormatTokenError,
    MetastockCatalogError,
    NoQuoteFileError,
    NotReferencedError,
    SourceDataError,
    WriteInterruptedError,
)
from metastock_catalog.core.models import (
    MAX_IDENTIFIER,
    MAX_SMALL_IDENTIFIER,
    MIN_IDENTIFIER,
    PREFIX_FIELDS,
    QUOTE_FIELD_BITS,
    CatalogField,
    Identifier,
    IndexKind,
    IndexRecord,
    QuoteField,
    ReportMode,
)
from metastock_catalog.core.reporting import MAX_ERROR_LENGTH, ErrorReporter

__all__ = [
    # Type aliases and constants
    "Identifier",
    "MIN_IDENTIFIER",
    "MAX_IDENTIFIER",
    "MAX_SMALL_IDENTIFIER",
    "QUOTE_FIELD_BITS",
    "PREFIX_FIELDS",
    # Enums
    "IndexKind",
    "ReportMode",
    "CatalogField",
    "QuoteField",
    # Models
    "IndexRecord",
    # Config
    "CatalogConfig",
    "OutputConfig",
    "FilterConfig",
    "DecodersConfig",
    "LoggingConfig",
    "load_config",
    # Exceptions
    "MetastockCatalogError",
    "ConfigurationError",
    "BadFormatError",
    "InvalidFormatTokenError",
    "SourceDataError",
    "NotReferencedError",
    "NoQuoteFileError",
    "DataIOError",
    "InternalInconsistencyError",
    "WriteInterruptedError",
    # Reporting
    "ErrorReporter",
    "MAX_ERROR_LENGTH",
]
