"""Extractor: one MetaStock directory, one catalog, one report at a time.

Every public method returns True on success and False on failure; the
reason for the last failure is available from ``last_error``.

Usage:
    extractor = Extractor(load_decoder_set("mydecoders:DECODERS"))
    if not (
        extractor.open_directory("/data/ms")
        and extractor.set_output_format("symbol,date,close", ReportMode.COMBINED)
        and extractor.dump_data(sys.stdout)
    ):
        print(extractor.last_error, file=sys.stderr)
"""

from __future__ import annotations

import logging
import os
from typing import TextIO

from metastock_catalog.catalog import FileCatalog, MasterReconciler, RecordFilter
from metastock_catalog.catalog.table import CatalogEntry
from metastock_catalog.core.exceptions import (
    ConfigurationError,
    InternalInconsistencyError,
    MetastockCatalogError,
)
from metastock_catalog.core.models import Identifier, IndexKind, ReportMode
from metastock_catalog.core.reporting import ErrorReporter
from metastock_catalog.output import FieldProjector, FieldSelection, ReportWriter
from metastock_catalog.sources import DecoderSet, IndexDecoder, MetastockDirectory, QuoteDecoder

logger = logging.getLogger(__name__)


class Extractor:
    """Session facade over scanner, reconciler, filters, and writer."""

    def __init__(
        self,
        decoders: DecoderSet,
        selection: FieldSelection | None = None,
        reporter: ErrorReporter | None = None,
    ) -> None:
        self._decoders = decoders
        self._projector = FieldProjector(selection)
        self._reporter = reporter or ErrorReporter()
        self._directory: MetastockDirectory | None = None
        self._catalog: FileCatalog | None = None
        self._index_counts: dict[IndexKind, int | None] = {}

    @property
    def last_error(self) -> str:
        return self._reporter.last_error

    @property
    def reporter(self) -> ErrorReporter:
        return self._reporter

    @property
    def catalog(self) -> FileCatalog | None:
        return self._catalog

    @property
    def directory(self) -> MetastockDirectory | None:
        return self._directory

    @property
    def selection(self) -> FieldSelection:
        return self._projector.selection

    @property
    def index_counts(self) -> dict[IndexKind, int | None]:
        """Record count per index source of the open directory (None = absent)."""
        return dict(self._index_counts)

    def _fail(self, exc: MetastockCatalogError) -> bool:
        if isinstance(exc, InternalInconsistencyError):
            logger.error("Index data is inconsistent: %s (%s)", exc, exc.context)
        self._reporter.record(exc)
        return False

    def _require_catalog(self) -> FileCatalog:
        if self._catalog is None:
            raise ConfigurationError("no directory opened", context={})
        return self._catalog

    # --- Entry points ---

    def open_directory(self, path: str | os.PathLike[str]) -> bool:
        """Scan ``path``, decode its index files, and build the catalog."""
        try:
            directory = MetastockDirectory(path)
            listing = directory.scan()

            catalog = FileCatalog()
            for identifier, name in listing.quote_files.items():
                catalog.register_quote_file(identifier, name)

            sources: dict[IndexKind, IndexDecoder | None] = {}
            for kind in IndexKind:
                data = directory.read_index(kind)
                sources[kind] = (
                    None if data is None else self._decoders.open_index(kind, data)
                )

            MasterReconciler(self._reporter).build(sources, catalog)
        except MetastockCatalogError as e:
            return self._fail(e)

        self._index_counts = {
            kind: None if decoder is None else decoder.count_records()
            for kind, decoder in sources.items()
        }
        self._directory = directory
        self._catalog = catalog
        logger.info(
            "Catalog for %s: %d entries, highest file number F%d",
            directory.path,
            sum(1 for _ in catalog.entries()),
            catalog.highest_identifier_seen,
        )
        return True

    def set_output_format(
        self,
        spec: str | int,
        mode: ReportMode | None = None,
        separator: str | None = None,
    ) -> bool:
        try:
            self._projector.set_output_format(spec, mode, separator)
        except MetastockCatalogError as e:
            return self._fail(e)
        return True

    def select_only(self, identifier: Identifier) -> bool:
        try:
            RecordFilter(self._require_catalog()).select_only(identifier)
        except MetastockCatalogError as e:
            return self._fail(e)
        return True

    def exclude_by_age(self, timestamp: str, reverse: bool = False) -> bool:
        try:
            catalog = self._require_catalog()
            RecordFilter(catalog, self._directory.modification_time).exclude_by_age(
                timestamp, reverse
            )
        except MetastockCatalogError as e:
            return self._fail(e)
        return True

    def dump_catalog(self, out: TextIO, header: bool = False) -> bool:
        try:
            catalog = self._require_catalog()
            ReportWriter(out, self._projector).write_catalog_report(catalog, header)
        except MetastockCatalogError as e:
            return self._fail(e)
        return True

    def dump_data(self, out: TextIO, header: bool = False) -> bool:
        try:
            catalog = self._require_catalog()
            ReportWriter(out, self._projector).write_combined_report(
                catalog, self._open_quotes, header
            )
        except MetastockCatalogError as e:
            return self._fail(e)
        return True

    def _open_quotes(self, entry: CatalogEntry) -> QuoteDecoder:
        data = self._directory.read_quote_file(entry.quote_file_name)
        selection = self._projector.selection
        return self._decoders.open_quotes(
            data, entry.field_bitset, selection.quote_fields, selection.separator
        )
