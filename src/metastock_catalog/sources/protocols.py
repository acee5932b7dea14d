"""Decoder protocols: the format-agnostic interface layer.

Architecture
------------
The catalog engine never looks inside a binary file. Raw bytes travel
from the directory scanner to a pluggable decoder set:

    MetastockDirectory → bytes → DecoderSet → IndexDecoder / QuoteDecoder

- **IndexDecoder** exposes the records of one MASTER, EMASTER or XMASTER
  file as ``IndexRecord`` values.

- **QuoteDecoder** streams the rows of one ``F<n>.DAT``/``F<n>.MWD``
  file as delimited text behind a caller-supplied prefix.

- **DecoderSet** builds both from raw bytes. A concrete set is loaded
  from a ``module:attribute`` path, so decoders can live in any package.
"""

from __future__ import annotations

import importlib
from typing import Protocol, TextIO, runtime_checkable

from metastock_catalog.core.exceptions import ConfigurationError
from metastock_catalog.core.models import IndexKind, IndexRecord, QuoteField


@runtime_checkable
class IndexDecoder(Protocol):
    """Record access over one decoded index file.

    ``get_record(i)`` is valid for ``1 <= i <= count_records()``.
    """

    def count_records(self) -> int: ...

    def get_record(self, index: int) -> IndexRecord: ...


@runtime_checkable
class QuoteDecoder(Protocol):
    """Row streaming over one decoded quote file."""

    def count_records(self) -> int:
        """Number of quote rows; negative when the file is unusable."""
        ...

    def print_rows(self, prefix: str, out: TextIO) -> int:
        """Write every row to ``out``, each starting with ``prefix``.

        Returns the number of rows written, or a negative value when the
        consumer stopped accepting output.
        """
        ...


@runtime_checkable
class DecoderSet(Protocol):
    """Factory for concrete index and quote decoders."""

    def open_index(self, kind: IndexKind, data: bytes) -> IndexDecoder: ...

    def open_quotes(
        self,
        data: memoryview,
        field_bitset: int,
        fields: QuoteField,
        separator: str,
    ) -> QuoteDecoder: ...


def load_decoder_set(path: str) -> DecoderSet:
    """Import a decoder set from ``"package.module:attribute"``.

    A callable attribute is called without arguments and its result used.
    """
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigurationError(
            f"Decoder path must look like 'package.module:attribute', got {path!r}",
            context={"field": "decoders.factory", "value": path},
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(
            f"Cannot import decoder module {module_name!r}: {e}",
            context={"field": "decoders.factory", "value": path},
        ) from e

    target = getattr(module, attr, None)
    if target is None:
        raise ConfigurationError(
            f"Decoder module {module_name!r} has no attribute {attr!r}",
            context={"field": "decoders.factory", "value": path},
        )
    if isinstance(target, type) or (callable(target) and not isinstance(target, DecoderSet)):
        decoders = target()
    else:
        decoders = target
    if not isinstance(decoders, DecoderSet):
        raise ConfigurationError(
            f"{path} does not provide open_index() and open_quotes()",
            context={"field": "decoders.factory", "value": path},
        )
    return decoders
