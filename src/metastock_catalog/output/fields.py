"""Field selection: format parsing, validation, and catalog rendering.

A format specification is either an integer literal or a token list.

Integer literal (any base accepted by ``int(text, 0)``)::

    bits 0..8   quote fields   (date, time, open, ... aux)
    bits 9..13  catalog fields (symbol, long_name, file_number, ...)

Token list, separated by any of ``, ; : space tab newline``::

    symbol,long_name,date,close     allow-list, starts from no fields
    +all,-long_name                 edit, starts from all fields

A leading ``+`` or ``-`` on the *first* token switches the starting point
to "all fields". ``all`` and ``none`` are accepted as tokens; ``none`` is
the complement of ``all``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from metastock_catalog.catalog.table import CatalogEntry
from metastock_catalog.core.exceptions import (
    BadFormatError,
    ConfigurationError,
    InvalidFormatTokenError,
)
from metastock_catalog.core.models import (
    PREFIX_FIELDS,
    QUOTE_FIELD_BITS,
    CatalogField,
    QuoteField,
    ReportMode,
)

_TOKEN_SEPARATORS = re.compile(r"[,;: \t\n]+")

_CATALOG_ORDER: tuple[CatalogField, ...] = (
    CatalogField.SYMBOL,
    CatalogField.LONG_NAME,
    CatalogField.FILE_NUMBER,
    CatalogField.FILE_NAME,
    CatalogField.FIELD_BITSET,
)

_QUOTE_ORDER: tuple[QuoteField, ...] = (
    QuoteField.DATE,
    QuoteField.TIME,
    QuoteField.OPEN,
    QuoteField.HIGH,
    QuoteField.LOW,
    QuoteField.CLOSE,
    QuoteField.VOLUME,
    QuoteField.OPEN_INT,
    QuoteField.AUX,
)

CATALOG_HEADERS: dict[CatalogField, str] = {
    CatalogField.SYMBOL: "symbol",
    CatalogField.LONG_NAME: "long_name",
    CatalogField.FILE_NUMBER: "file_number",
    CatalogField.FILE_NAME: "file_name",
    CatalogField.FIELD_BITSET: "field_bitset",
}

QUOTE_HEADERS: dict[QuoteField, str] = {
    QuoteField.DATE: "date",
    QuoteField.TIME: "time",
    QuoteField.OPEN: "open",
    QuoteField.HIGH: "high",
    QuoteField.LOW: "low",
    QuoteField.CLOSE: "close",
    QuoteField.VOLUME: "volume",
    QuoteField.OPEN_INT: "openint",
    QuoteField.AUX: "aux",
}

_ALIASES = {
    "sym": CatalogField.SYMBOL,
    "name": CatalogField.LONG_NAME,
    "number": CatalogField.FILE_NUMBER,
    "file": CatalogField.FILE_NAME,
    "fields": CatalogField.FIELD_BITSET,
    "vol": QuoteField.VOLUME,
    "oi": QuoteField.OPEN_INT,
}

FIELD_TOKENS: dict[str, CatalogField | QuoteField] = {
    **{name: f for f, name in CATALOG_HEADERS.items()},
    **{name: f for f, name in QUOTE_HEADERS.items()},
    **_ALIASES,
}


def _split_bits(value: int) -> tuple[CatalogField, QuoteField]:
    if value < 0:
        raise BadFormatError(
            f"wrong output format: {value}",
            context={"field": "format", "value": value},
        )
    quote = QuoteField(value & QuoteField.ALL)
    catalog = CatalogField((value >> QUOTE_FIELD_BITS) & CatalogField.ALL)
    return catalog, quote


def _parse_int_literal(text: str) -> int | None:
    try:
        return int(text, 0)
    except ValueError:
        return None


def parse_format(spec: str | int) -> tuple[CatalogField, QuoteField]:
    """Translate a format specification into (catalog, quote) masks."""
    if isinstance(spec, int):
        return _split_bits(spec)

    value = _parse_int_literal(spec.strip())
    if value is not None:
        return _split_bits(value)

    tokens = [t for t in _TOKEN_SEPARATORS.split(spec) if t]
    if tokens and tokens[0][0] in "+-":
        catalog, quote = CatalogField.ALL, QuoteField.ALL
    else:
        catalog, quote = CatalogField.NONE, QuoteField.NONE

    for token in tokens:
        include = True
        name = token
        if name[0] in "+-":
            include = name[0] == "+"
            name = name[1:]
        name = name.lower()

        if name in ("all", "none"):
            if name == "none":
                include = not include
            if include:
                catalog, quote = CatalogField.ALL, QuoteField.ALL
            else:
                catalog, quote = CatalogField.NONE, QuoteField.NONE
            continue

        selected = FIELD_TOKENS.get(name)
        if selected is None:
            raise InvalidFormatTokenError(
                f"unknown output format token: {token!r}",
                context={"token": token},
            )
        if isinstance(selected, CatalogField):
            bits = int(catalog) | int(selected) if include else int(catalog) & ~int(selected)
            catalog = CatalogField(bits)
        else:
            bits = int(quote) | int(selected) if include else int(quote) & ~int(selected)
            quote = QuoteField(bits)

    return catalog, quote


@dataclass(frozen=True)
class FieldSelection:
    """Which catalog and quote fields a report renders, and how.

    ``prefix_fields`` is the subset of catalog fields written in front of
    every quote row of a combined report.
    """

    catalog_fields: CatalogField = CatalogField.ALL
    quote_fields: QuoteField = QuoteField.ALL
    separator: str = field(default="\t")

    def __post_init__(self) -> None:
        if len(self.separator) != 1:
            raise ConfigurationError(
                f"separator must be a single character, got {self.separator!r}",
                context={"field": "separator", "value": self.separator},
            )

    @classmethod
    def from_format(cls, spec: str | int, separator: str = "\t") -> FieldSelection:
        catalog, quote = parse_format(spec)
        return cls(catalog_fields=catalog, quote_fields=quote, separator=separator)

    @property
    def prefix_fields(self) -> CatalogField:
        return self.catalog_fields & PREFIX_FIELDS

    @property
    def bits(self) -> int:
        """The integer literal that reproduces this selection."""
        return (int(self.catalog_fields) << QUOTE_FIELD_BITS) | int(self.quote_fields)

    def validate_for(self, mode: ReportMode) -> None:
        """Raise BadFormatError when ``mode`` would render nothing."""
        if mode is ReportMode.CATALOG and not self.catalog_fields:
            raise BadFormatError(
                "output format selects no catalog fields",
                context={"mode": str(mode)},
            )
        if mode is ReportMode.COMBINED and not (self.prefix_fields or self.quote_fields):
            raise BadFormatError(
                "output format selects no fields for data output",
                context={"mode": str(mode)},
            )


def _catalog_value(entry: CatalogEntry, f: CatalogField) -> str:
    if f is CatalogField.SYMBOL:
        return entry.symbol
    if f is CatalogField.LONG_NAME:
        return entry.long_name
    if f is CatalogField.FILE_NUMBER:
        return str(entry.identifier)
    if f is CatalogField.FILE_NAME:
        return entry.quote_file_name
    return str(entry.field_bitset)


def render_catalog_fields(entry: CatalogEntry, mask: CatalogField, separator: str) -> str:
    """Selected values in canonical order, each followed by ``separator``."""
    return "".join(
        _catalog_value(entry, f) + separator for f in _CATALOG_ORDER if mask & f
    )


def render_catalog_header(mask: CatalogField, separator: str) -> str:
    return "".join(CATALOG_HEADERS[f] + separator for f in _CATALOG_ORDER if mask & f)


def render_quote_header(mask: QuoteField, separator: str) -> str:
    return separator.join(QUOTE_HEADERS[f] for f in _QUOTE_ORDER if mask & f)


class FieldProjector:
    """Holds the active FieldSelection and renders text from it."""

    def __init__(self, selection: FieldSelection | None = None) -> None:
        self._selection = selection or FieldSelection()

    @property
    def selection(self) -> FieldSelection:
        return self._selection

    def set_output_format(
        self,
        spec: str | int,
        mode: ReportMode | None = None,
        separator: str | None = None,
    ) -> FieldSelection:
        """Replace the selection; on failure the previous one stays active."""
        sep = self._selection.separator if separator is None else separator
        selection = FieldSelection.from_format(spec, separator=sep)
        if mode is not None:
            selection.validate_for(mode)
        self._selection = selection
        return selection

    def catalog_line(self, entry: CatalogEntry) -> str:
        s = self._selection
        return render_catalog_fields(entry, s.catalog_fields, s.separator)

    def catalog_header(self) -> str:
        s = self._selection
        return render_catalog_header(s.catalog_fields, s.separator)

    def row_prefix(self, entry: CatalogEntry) -> str:
        """Catalog text written in front of each quote row."""
        s = self._selection
        text = render_catalog_fields(entry, s.prefix_fields, s.separator)
        if text and not s.quote_fields:
            text = text[: -len(s.separator)]
        return text

    def combined_header(self) -> str:
        s = self._selection
        prefix = render_catalog_header(s.prefix_fields, s.separator)
        if prefix and not s.quote_fields:
            prefix = prefix[: -len(s.separator)]
        return prefix + render_quote_header(s.quote_fields, s.separator)
