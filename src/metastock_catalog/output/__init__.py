"""metastock_catalog.output: field projection and report writing."""

from metastock_catalog.output.fields import (
    CATALOG_HEADERS,
    FIELD_TOKENS,
    QUOTE_HEADERS,
    FieldProjector,
    FieldSelection,
    parse_format,
    render_catalog_fields,
    render_catalog_header,
    render_quote_header,
)
from metastock_catalog.output.writer import ReportWriter

__all__ = [
    "CATALOG_HEADERS",
    "QUOTE_HEADERS",
    "FIELD_TOKENS",
    "FieldProjector",
    "FieldSelection",
    "parse_format",
    "render_catalog_fields",
    "render_catalog_header",
    "render_quote_header",
    "ReportWriter",
]
