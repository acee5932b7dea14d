"""FileCatalog: sparse, identifier-indexed table of catalog entries."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

from metastock_catalog.core.exceptions import InternalInconsistencyError
from metastock_catalog.core.models import MAX_IDENTIFIER, Identifier, IndexKind, IndexRecord

logger = logging.getLogger(__name__)

GROWTH_CHUNK = 128


@dataclass
class CatalogEntry:
    """One catalog slot. A fresh slot is zero-valued and unassigned."""

    identifier: Identifier = 0
    assigned: bool = False
    symbol: str = ""
    long_name: str = ""
    quote_file_name: str = ""
    field_bitset: int = 0
    skipped: bool = False
    source: IndexKind | None = None


class FileCatalog:
    """Growable table indexed directly by file number.

    Slots are allocated in chunks of ``GROWTH_CHUNK``. The skip flag lives
    on each entry, so ``skip_table`` always has the same length as the
    catalog itself.
    """

    def __init__(self) -> None:
        self._slots: list[CatalogEntry] = []
        self._highest_seen = 0

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, identifier: object) -> bool:
        return isinstance(identifier, int) and self.get(identifier) is not None

    @property
    def length(self) -> int:
        return len(self._slots)

    @property
    def highest_identifier_seen(self) -> int:
        return self._highest_seen

    @property
    def skip_table(self) -> list[bool]:
        return [slot.skipped for slot in self._slots]

    def ensure_capacity(self, identifier: Identifier) -> None:
        """Grow so that ``identifier`` is a valid slot index."""
        if not 0 <= identifier <= MAX_IDENTIFIER:
            raise ValueError(
                f"identifier must be between 0 and {MAX_IDENTIFIER}, got {identifier}"
            )
        if identifier < len(self._slots):
            return
        target = (identifier // GROWTH_CHUNK + 1) * GROWTH_CHUNK
        added = target - len(self._slots)
        self._slots.extend(CatalogEntry() for _ in range(added))
        logger.debug("Catalog grown to %d slots", target)

    def slot(self, identifier: Identifier) -> CatalogEntry | None:
        """Bounds-checked raw slot, assigned or not."""
        if 0 <= identifier < len(self._slots):
            return self._slots[identifier]
        return None

    def get(self, identifier: Identifier) -> CatalogEntry | None:
        """Return the entry for ``identifier`` if it is assigned."""
        entry = self.slot(identifier)
        if entry is None or not entry.assigned:
            return None
        return entry

    def register_quote_file(self, identifier: Identifier, file_name: str) -> None:
        self.ensure_capacity(identifier)
        self._slots[identifier].quote_file_name = file_name
        self._note_identifier(identifier)

    def assign(self, record: IndexRecord, source: IndexKind) -> CatalogEntry:
        """Populate an unassigned slot from an index record."""
        self.ensure_capacity(record.identifier)
        entry = self._slots[record.identifier]
        if entry.assigned:
            raise InternalInconsistencyError(
                f"F{record.identifier} assigned twice "
                f"({entry.source} then {source})",
                context={
                    "identifier": record.identifier,
                    "source": str(source),
                    "previous_source": str(entry.source) if entry.source else None,
                },
            )
        entry.identifier = record.identifier
        entry.assigned = True
        entry.symbol = record.symbol
        entry.long_name = record.long_name
        entry.field_bitset = record.field_bitset
        entry.source = source
        self._note_identifier(record.identifier)
        return entry

    def overlay_long_name(
        self, identifier: Identifier, long_name: str, source: IndexKind
    ) -> CatalogEntry:
        """Replace the long name of an already assigned entry."""
        entry = self.get(identifier)
        if entry is None:
            raise InternalInconsistencyError(
                f"F{identifier} listed in {source} but not assigned",
                context={"identifier": identifier, "source": str(source)},
            )
        entry.long_name = long_name
        return entry

    def entries(self) -> Iterator[CatalogEntry]:
        """Assigned entries in ascending identifier order."""
        return (slot for slot in self._slots if slot.assigned)

    def included(self) -> Iterator[CatalogEntry]:
        """Assigned, non-skipped entries in ascending identifier order."""
        return (slot for slot in self._slots if slot.assigned and not slot.skipped)

    def _note_identifier(self, identifier: Identifier) -> None:
        if identifier > self._highest_seen:
            self._highest_seen = identifier
