"""Pydantic data models and field enumerations: the system's type contracts."""

from __future__ import annotations

from enum import IntFlag, StrEnum

from pydantic import BaseModel, ConfigDict, field_validator

# --- Type Aliases ---

Identifier = int

# --- Constants ---

MIN_IDENTIFIER = 1
MAX_IDENTIFIER = 65535

# Highest file number MASTER/EMASTER can address; XMASTER covers the rest.
MAX_SMALL_IDENTIFIER = 255

# Quote fields occupy the low bits of an integer format literal.
QUOTE_FIELD_BITS = 9

# --- Enumerations ---


class IndexKind(StrEnum):
    """The three index sources, in reconciliation precedence order."""

    MASTER = "master"
    EMASTER = "emaster"
    XMASTER = "xmaster"

    @property
    def file_name(self) -> str:
        """Canonical on-disk name (matched case-insensitively)."""
        return self.value.upper()


class ReportMode(StrEnum):
    """Report kinds a field selection can be validated against."""

    CATALOG = "catalog"
    COMBINED = "combined"


class CatalogField(IntFlag):
    """Catalog attributes that can be projected, in canonical order."""

    NONE = 0
    SYMBOL = 1 << 0
    LONG_NAME = 1 << 1
    FILE_NUMBER = 1 << 2
    FILE_NAME = 1 << 3
    FIELD_BITSET = 1 << 4

    ALL = SYMBOL | LONG_NAME | FILE_NUMBER | FILE_NAME | FIELD_BITSET


class QuoteField(IntFlag):
    """Quote-record attributes rendered by the external quote decoder."""

    NONE = 0
    DATE = 1 << 0
    TIME = 1 << 1
    OPEN = 1 << 2
    HIGH = 1 << 3
    LOW = 1 << 4
    CLOSE = 1 << 5
    VOLUME = 1 << 6
    OPEN_INT = 1 << 7
    AUX = 1 << 8

    ALL = DATE | TIME | OPEN | HIGH | LOW | CLOSE | VOLUME | OPEN_INT | AUX


# Catalog attributes allowed to precede quote rows.
PREFIX_FIELDS = CatalogField.SYMBOL | CatalogField.LONG_NAME


# --- Index Models ---


class IndexRecord(BaseModel):
    """One record as produced by an index decoder."""

    model_config = ConfigDict(frozen=True)

    identifier: Identifier
    symbol: str
    long_name: str = ""
    field_bitset: int = 0

    @field_validator("identifier")
    @classmethod
    def identifier_in_range(cls, v: int) -> int:
        if not MIN_IDENTIFIER <= v <= MAX_IDENTIFIER:
            raise ValueError(
                f"identifier must be between {MIN_IDENTIFIER} and "
                f"{MAX_IDENTIFIER}, got {v}"
            )
        return v

    @field_validator("field_bitset")
    @classmethod
    def field_bitset_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"field_bitset must be >= 0, got {v}")
        return v
