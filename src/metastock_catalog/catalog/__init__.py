"""metastock_catalog.catalog: catalog table, reconciliation, filters."""

from metastock_catalog.catalog.filters import RecordFilter, parse_timestamp
from metastock_catalog.catalog.reconcile import (
    MasterReconciler,
    ReconcileAction,
    ReconcileStep,
    plan_reconciliation,
)
from metastock_catalog.catalog.table import GROWTH_CHUNK, CatalogEntry, FileCatalog

__all__ = [
    "CatalogEntry",
    "FileCatalog",
    "GROWTH_CHUNK",
    "MasterReconciler",
    "ReconcileAction",
    "ReconcileStep",
    "plan_reconciliation",
    "RecordFilter",
    "parse_timestamp",
]
