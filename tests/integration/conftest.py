"""Integration test fixtures: a decoder set importable by module path."""

from __future__ import annotations

import textwrap

import pytest

_DECODER_MODULE = textwrap.dedent(
    '''
    """Plain-text decoders matching the ms_dir fixture layout."""

    from metastock_catalog.core.models import IndexRecord, QuoteField

    _ORDER = [
        QuoteField.DATE, QuoteField.TIME, QuoteField.OPEN, QuoteField.HIGH,
        QuoteField.LOW, QuoteField.CLOSE, QuoteField.VOLUME, QuoteField.OPEN_INT,
        QuoteField.AUX,
    ]


    class _Index:
        def __init__(self, records):
            self._records = records

        def count_records(self):
            return len(self._records)

        def get_record(self, index):
            return self._records[index - 1]


    class _Quotes:
        def __init__(self, rows):
            self._rows = rows

        def count_records(self):
            return len(self._rows)

        def print_rows(self, prefix, out):
            for row in self._rows:
                out.write(prefix + row + "\\n")
            return len(self._rows)


    class TextDecoders:
        def open_index(self, kind, data):
            records = []
            for line in data.decode().splitlines():
                parts = (line.split("|") + ["", "0"])[:4]
                records.append(IndexRecord(
                    identifier=int(parts[0]), symbol=parts[1],
                    long_name=parts[2], field_bitset=int(parts[3] or 0),
                ))
            return _Index(records)

        def open_quotes(self, data, field_bitset, fields, separator):
            rows = []
            for line in bytes(data).decode().splitlines():
                values = line.split(",")
                rows.append(separator.join(
                    v for f, v in zip(_ORDER, values) if fields & f
                ))
            return _Quotes(rows)
    '''
)


@pytest.fixture
def decoder_path(tmp_path, monkeypatch) -> str:
    """Module path of a text decoder set written to a temporary directory."""
    pkg_dir = tmp_path / "decoder_pkg"
    pkg_dir.mkdir()
    (pkg_dir / "ms_text_decoders.py").write_text(_DECODER_MODULE)
    monkeypatch.syspath_prepend(str(pkg_dir))
    return "ms_text_decoders:TextDecoders"
