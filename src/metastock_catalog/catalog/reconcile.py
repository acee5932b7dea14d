"""Master reconciliation: merge MASTER, EMASTER and XMASTER into one catalog.

The three index files of a MetaStock directory are often mutually
inconsistent or individually corrupt. Precedence is expressed as an
ordered plan computed from record counts alone, then executed:

1. MASTER has records → assign from MASTER. EMASTER with exactly the same
   record count is applied as an overlay (long names only); any other
   EMASTER is ignored.
2. Otherwise EMASTER has records → assign from EMASTER.
3. No records anywhere → ``SourceDataError("all master files invalid")``.
4. XMASTER has records → assign from XMASTER (identifiers above 255).

Every assign step must land on an unassigned slot.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum

from metastock_catalog.catalog.table import FileCatalog
from metastock_catalog.core.exceptions import SourceDataError
from metastock_catalog.core.models import MAX_SMALL_IDENTIFIER, IndexKind
from metastock_catalog.core.reporting import ErrorReporter
from metastock_catalog.sources.protocols import IndexDecoder

logger = logging.getLogger(__name__)


class ReconcileAction(StrEnum):
    """What a reconciliation step does with its source."""

    ASSIGN = "assign"
    OVERLAY = "overlay"
    SKIP = "skip"


@dataclass(frozen=True)
class ReconcileStep:
    """One row of the reconciliation plan."""

    kind: IndexKind
    action: ReconcileAction
    reason: str


def _has_records(count: int | None) -> bool:
    return count is not None and count > 0


def plan_reconciliation(counts: Mapping[IndexKind, int | None]) -> list[ReconcileStep]:
    """Decide, from record counts only, how each index source is applied.

    ``counts`` maps each kind to its record count, or None when the file
    is absent. Missing keys count as absent.
    """
    master = counts.get(IndexKind.MASTER)
    emaster = counts.get(IndexKind.EMASTER)
    xmaster = counts.get(IndexKind.XMASTER)

    steps: list[ReconcileStep] = []
    if _has_records(master):
        steps.append(
            ReconcileStep(IndexKind.MASTER, ReconcileAction.ASSIGN, "primary source")
        )
        if emaster == master:
            steps.append(
                ReconcileStep(
                    IndexKind.EMASTER, ReconcileAction.OVERLAY, "record count matches MASTER"
                )
            )
        elif _has_records(emaster):
            steps.append(
                ReconcileStep(
                    IndexKind.EMASTER,
                    ReconcileAction.SKIP,
                    f"record count {emaster} differs from MASTER ({master})",
                )
            )
    elif _has_records(emaster):
        steps.append(
            ReconcileStep(IndexKind.EMASTER, ReconcileAction.ASSIGN, "MASTER not usable")
        )
    elif not _has_records(xmaster):
        raise SourceDataError(
            "all master files invalid",
            context={"counts": {str(k): v for k, v in counts.items()}},
        )

    if _has_records(xmaster):
        steps.append(
            ReconcileStep(IndexKind.XMASTER, ReconcileAction.ASSIGN, "extended range")
        )
    return steps


class MasterReconciler:
    """Builds a FileCatalog from up to three index decoders.

    Usage:
        reconciler = MasterReconciler()
        catalog = reconciler.build(
            {IndexKind.MASTER: master, IndexKind.EMASTER: emaster},
            catalog=catalog_with_quote_files,
        )
    """

    def __init__(self, reporter: ErrorReporter | None = None) -> None:
        self._reporter = reporter or ErrorReporter()

    def build(
        self,
        sources: Mapping[IndexKind, IndexDecoder | None],
        catalog: FileCatalog | None = None,
    ) -> FileCatalog:
        catalog = catalog if catalog is not None else FileCatalog()

        counts: dict[IndexKind, int | None] = {}
        for kind in IndexKind:
            decoder = sources.get(kind)
            if decoder is None:
                counts[kind] = None
                if kind is not IndexKind.XMASTER:
                    self._reporter.warn("%s file not found", kind.file_name)
                continue
            counts[kind] = decoder.count_records()
            if counts[kind] <= 0:
                self._reporter.warn("%s not usable: no records", kind.file_name)

        steps = plan_reconciliation(counts)
        for step in steps:
            decoder = sources[step.kind]
            if step.action is ReconcileAction.ASSIGN:
                n = self._assign(catalog, step.kind, decoder)
            elif step.action is ReconcileAction.OVERLAY:
                n = self._overlay(catalog, step.kind, decoder)
            else:
                self._reporter.warn("%s ignored: %s", step.kind.file_name, step.reason)
                continue
            logger.info("%s %s: %d records (%s)", step.action, step.kind.file_name, n, step.reason)

        if (
            counts[IndexKind.XMASTER] is None
            and catalog.highest_identifier_seen > MAX_SMALL_IDENTIFIER
        ):
            self._reporter.warn(
                "XMASTER not found but F%d is referenced", catalog.highest_identifier_seen
            )
        return catalog

    @staticmethod
    def _assign(catalog: FileCatalog, kind: IndexKind, decoder: IndexDecoder) -> int:
        count = decoder.count_records()
        for i in range(1, count + 1):
            catalog.assign(decoder.get_record(i), kind)
        return count

    @staticmethod
    def _overlay(catalog: FileCatalog, kind: IndexKind, decoder: IndexDecoder) -> int:
        count = decoder.count_records()
        for i in range(1, count + 1):
            record = decoder.get_record(i)
            catalog.overlay_long_name(record.identifier, record.long_name, kind)
        return count
