"""Report writer: catalog-only and combined (catalog + quote rows) output."""

from __future__ import annotations

import logging
from typing import Callable, TextIO

from metastock_catalog.catalog.table import CatalogEntry, FileCatalog
from metastock_catalog.core.exceptions import (
    NoQuoteFileError,
    SourceDataError,
    WriteInterruptedError,
)
from metastock_catalog.core.models import ReportMode
from metastock_catalog.output.fields import FieldProjector
from metastock_catalog.sources.protocols import QuoteDecoder

logger = logging.getLogger(__name__)

QuoteOpener = Callable[[CatalogEntry], QuoteDecoder]


class ReportWriter:
    """Writes reports for the included entries of a catalog to one stream.

    Entries are visited in ascending identifier order; skipped and
    unassigned slots are never written. The selection is validated for the
    report mode before the first byte is written.
    """

    def __init__(self, out: TextIO, projector: FieldProjector) -> None:
        self._out = out
        self._projector = projector

    def write_catalog_report(self, catalog: FileCatalog, header: bool = False) -> int:
        """One line of selected catalog fields per included entry."""
        self._projector.selection.validate_for(ReportMode.CATALOG)

        written = 0
        try:
            if header:
                self._out.write(self._projector.catalog_header() + "\n")
            for entry in catalog.included():
                self._out.write(self._projector.catalog_line(entry) + "\n")
                written += 1
        except BrokenPipeError as e:
            raise WriteInterruptedError("output closed", context={}) from e
        return written

    def write_combined_report(
        self,
        catalog: FileCatalog,
        open_quotes: QuoteOpener,
        header: bool = False,
    ) -> int:
        """Quote rows of every included entry, each behind its catalog prefix.

        The first entry without a quote file, unusable quote file, or
        interrupted write stops the report.
        """
        self._projector.selection.validate_for(ReportMode.COMBINED)

        written = 0
        try:
            if header:
                self._out.write(self._projector.combined_header() + "\n")
            for entry in catalog.included():
                self._write_entry(entry, open_quotes)
                written += 1
        except BrokenPipeError as e:
            raise WriteInterruptedError("output closed", context={}) from e
        return written

    def _write_entry(self, entry: CatalogEntry, open_quotes: QuoteOpener) -> None:
        if not entry.quote_file_name:
            raise NoQuoteFileError(
                f"no quote file found for F{entry.identifier}",
                context={"identifier": entry.identifier},
            )

        decoder = open_quotes(entry)
        count = decoder.count_records()
        if count < 0:
            raise SourceDataError(
                f"{entry.quote_file_name}: quote file not usable",
                context={"identifier": entry.identifier},
            )
        logger.info("#%d: %d records", entry.identifier, count)

        if decoder.print_rows(self._projector.row_prefix(entry), self._out) < 0:
            raise WriteInterruptedError(
                f"output interrupted while writing F{entry.identifier}",
                context={"identifier": entry.identifier},
            )
