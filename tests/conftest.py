"""Shared pytest fixtures for metastock-catalog.

The decoders here are in-memory stand-ins for the external binary
decoders. ``TextDecoderSet`` reads a plain-text rendition of the files:

    index file:  one record per line, ``identifier|symbol|long_name|field_bitset``
    quote file:  one row per line, nine comma-separated quote values
"""

from __future__ import annotations

from pathlib import Path

import pytest

from metastock_catalog.catalog import FileCatalog
from metastock_catalog.core.models import IndexKind, IndexRecord, QuoteField
from metastock_catalog.output.fields import _QUOTE_ORDER


class FakeIndexDecoder:
    """IndexDecoder over a list of records."""

    def __init__(self, records: list[IndexRecord]):
        self._records = list(records)

    def count_records(self) -> int:
        return len(self._records)

    def get_record(self, index: int) -> IndexRecord:
        return self._records[index - 1]


class FakeQuoteDecoder:
    """QuoteDecoder writing pre-rendered rows."""

    def __init__(self, rows: list[str], count: int | None = None, result: int | None = None):
        self.rows = rows
        self._count = count
        self._result = result
        self.prefixes: list[str] = []

    def count_records(self) -> int:
        return len(self.rows) if self._count is None else self._count

    def print_rows(self, prefix, out) -> int:
        self.prefixes.append(prefix)
        if self._result is not None and self._result < 0:
            return self._result
        for row in self.rows:
            out.write(prefix + row + "\n")
        return len(self.rows)


class TextDecoderSet:
    """DecoderSet over the plain-text file layout described above."""

    def __init__(self):
        self.opened_quotes: list[tuple[int, QuoteField, str]] = []

    def open_index(self, kind: IndexKind, data: bytes) -> FakeIndexDecoder:
        records = []
        for line in data.decode().splitlines():
            if not line.strip():
                continue
            identifier, symbol, long_name, bits = (line.split("|") + ["", "0"])[:4]
            records.append(
                IndexRecord(
                    identifier=int(identifier),
                    symbol=symbol,
                    long_name=long_name,
                    field_bitset=int(bits or 0),
                )
            )
        return FakeIndexDecoder(records)

    def open_quotes(self, data, field_bitset, fields, separator) -> FakeQuoteDecoder:
        self.opened_quotes.append((field_bitset, fields, separator))
        rows = []
        for line in bytes(data).decode().splitlines():
            values = line.split(",")
            rows.append(
                separator.join(v for f, v in zip(_QUOTE_ORDER, values) if fields & f)
            )
        return FakeQuoteDecoder(rows)


def make_records(*specs: tuple) -> list[IndexRecord]:
    """Build IndexRecords from (identifier, symbol[, long_name]) tuples."""
    records = []
    for spec in specs:
        identifier, symbol, *rest = spec
        records.append(
            IndexRecord(
                identifier=identifier,
                symbol=symbol,
                long_name=rest[0] if rest else "",
            )
        )
    return records


@pytest.fixture
def index_decoder():
    """Factory: index_decoder((1, "AAA", "Alpha"), (2, "BBB")) -> FakeIndexDecoder."""

    def _make(*specs: tuple) -> FakeIndexDecoder:
        return FakeIndexDecoder(make_records(*specs))

    return _make


@pytest.fixture
def quote_decoder():
    """Factory for FakeQuoteDecoder."""
    return FakeQuoteDecoder


@pytest.fixture
def text_decoders() -> TextDecoderSet:
    return TextDecoderSet()


@pytest.fixture
def sample_catalog() -> FileCatalog:
    """Catalog with assigned entries 10, 42, 99 (all with quote files)."""
    catalog = FileCatalog()
    for identifier, symbol, name in [
        (10, "AAA", "Alpha Corp"),
        (42, "BBB", "Beta Inc"),
        (99, "CCC", "Gamma Ltd"),
    ]:
        catalog.register_quote_file(identifier, f"F{identifier}.DAT")
        catalog.assign(
            IndexRecord(identifier=identifier, symbol=symbol, long_name=name, field_bitset=0x7F),
            IndexKind.MASTER,
        )
    return catalog


@pytest.fixture
def ms_dir(tmp_path: Path) -> Path:
    """A MetaStock directory in the text layout understood by TextDecoderSet.

    MASTER and EMASTER list F1 and F2 (EMASTER with longer names);
    XMASTER lists F300. Quote files exist for F1, F2 and F300.
    """
    d = tmp_path / "ms"
    d.mkdir()
    (d / "MASTER").write_text("1|AAA|Alpha|127\n2|BBB|Beta|127\n")
    (d / "EMASTER").write_text("1|AAA|Alpha Corporation\n2|BBB|Beta Incorporated\n")
    (d / "XMASTER").write_text("300|XXX|Extended Holdings|127\n")
    (d / "F1.DAT").write_text(
        "20240102,0,10.0,11.0,9.5,10.5,1000,0,0\n"
        "20240103,0,10.5,12.0,10.0,11.5,1500,0,0\n"
    )
    (d / "F2.DAT").write_text("20240102,0,20.0,21.0,19.0,20.5,500,0,0\n")
    (d / "F300.MWD").write_text("20240102,0,5.0,5.5,4.5,5.25,50,0,0\n")
    (d / "notes.txt").write_text("ignored\n")
    return d
