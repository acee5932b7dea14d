"""Record filters: mark catalog entries as skipped for the next report."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from metastock_catalog.catalog.table import FileCatalog
from metastock_catalog.core.exceptions import ConfigurationError, NotReferencedError
from metastock_catalog.core.models import Identifier

logger = logging.getLogger(__name__)

MtimeLookup = Callable[[str], datetime]

_TIMESTAMP_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%d")


def parse_timestamp(text: str) -> datetime:
    """Parse a literal date or timestamp given on the command line."""
    value = text.strip()
    for fmt in _TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            pass
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise ConfigurationError(
            f"Invalid timestamp: {text!r} (expected YYYY-MM-DD[ HH:MM:SS])",
            context={"field": "timestamp", "value": text},
        ) from None
    if parsed.tzinfo is not None:
        # File times are compared as naive local time.
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


class RecordFilter:
    """Applies selection rules to a catalog's skip flags.

    Filters only ever add skips, so they compose in any order; the one
    exception is ``select_only``, which first skips everything else.

    Parameters
    ----------
    catalog : FileCatalog
        The catalog whose entries are marked.
    mtime_lookup : Callable[[str], datetime] | None
        Maps a quote-file name to its modification time. Required for
        ``exclude_by_age``.
    """

    def __init__(self, catalog: FileCatalog, mtime_lookup: MtimeLookup | None = None) -> None:
        self._catalog = catalog
        self._mtime_lookup = mtime_lookup

    def select_only(self, identifier: Identifier) -> None:
        """Skip every assigned entry except ``identifier``."""
        target = self._catalog.get(identifier)
        if target is None:
            raise NotReferencedError(
                "data file not referenced by master files",
                context={"identifier": identifier},
            )
        for entry in self._catalog.entries():
            entry.skipped = True
        target.skipped = False

    def exclude_by_age(self, threshold: datetime | str, reverse: bool = False) -> int:
        """Skip entries by quote-file modification time.

        With ``reverse=False`` entries strictly older than ``threshold``
        are skipped; with ``reverse=True`` those at or after it are.
        Returns the number of entries newly skipped.
        """
        if isinstance(threshold, str):
            threshold = parse_timestamp(threshold)
        if self._mtime_lookup is None:
            raise ConfigurationError(
                "exclude_by_age requires a modification-time lookup",
                context={"field": "mtime_lookup"},
            )

        skipped = 0
        for identifier in range(len(self._catalog)):
            entry = self._catalog.slot(identifier)
            if entry is None or not entry.quote_file_name or entry.skipped:
                continue
            mtime = self._mtime_lookup(entry.quote_file_name)
            older = mtime < threshold
            if older != reverse:
                entry.skipped = True
                skipped += 1

        logger.info(
            "Excluded %d entries %s %s",
            skipped, "at or after" if reverse else "older than", threshold,
        )
        return skipped
