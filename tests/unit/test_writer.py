"""Tests for output.writer: catalog and combined reports."""

import io

import pytest

from metastock_catalog.core.exceptions import (
    BadFormatError,
    NoQuoteFileError,
    SourceDataError,
    WriteInterruptedError,
)
from metastock_catalog.output.fields import FieldProjector, FieldSelection
from metastock_catalog.output.writer import ReportWriter


def _writer(spec: str, sep: str = ",") -> tuple[ReportWriter, io.StringIO]:
    out = io.StringIO()
    return ReportWriter(out, FieldProjector(FieldSelection.from_format(spec, sep))), out


class _BrokenPipe(io.StringIO):
    def write(self, s):
        raise BrokenPipeError(32, "Broken pipe")


# ---------------------------------------------------------------------------
# Catalog report
# ---------------------------------------------------------------------------


class TestCatalogReport:
    def test_lines_in_identifier_order(self, sample_catalog):
        writer, out = _writer("symbol,long_name")
        assert writer.write_catalog_report(sample_catalog) == 3
        assert out.getvalue() == (
            "AAA,Alpha Corp,\n"
            "BBB,Beta Inc,\n"
            "CCC,Gamma Ltd,\n"
        )

    def test_header(self, sample_catalog):
        writer, out = _writer("symbol,file_number")
        writer.write_catalog_report(sample_catalog, header=True)
        lines = out.getvalue().splitlines()
        assert lines[0] == "symbol,file_number,"
        assert lines[1] == "AAA,10,"

    def test_skipped_entries_omitted(self, sample_catalog):
        sample_catalog.get(10).skipped = True
        writer, out = _writer("symbol")
        assert writer.write_catalog_report(sample_catalog) == 2
        assert out.getvalue() == "BBB,\nCCC,\n"

    def test_unassigned_slots_with_files_omitted(self, sample_catalog):
        sample_catalog.register_quote_file(50, "F50.DAT")
        writer, out = _writer("symbol")
        writer.write_catalog_report(sample_catalog)
        assert out.getvalue().count("\n") == 3

    def test_no_catalog_fields_fails_before_output(self, sample_catalog):
        writer, out = _writer("date,close")
        with pytest.raises(BadFormatError):
            writer.write_catalog_report(sample_catalog, header=True)
        assert out.getvalue() == ""

    def test_broken_pipe(self, sample_catalog):
        writer = ReportWriter(_BrokenPipe(), FieldProjector())
        with pytest.raises(WriteInterruptedError):
            writer.write_catalog_report(sample_catalog)


# ---------------------------------------------------------------------------
# Combined report
# ---------------------------------------------------------------------------


class TestCombinedReport:
    def test_rows_prefixed(self, sample_catalog, quote_decoder):
        decoders = {}

        def open_quotes(entry):
            decoders[entry.identifier] = quote_decoder([f"r{entry.identifier}a", f"r{entry.identifier}b"])
            return decoders[entry.identifier]

        writer, out = _writer("symbol,date,close")
        assert writer.write_combined_report(sample_catalog, open_quotes) == 3
        assert out.getvalue().splitlines() == [
            "AAA,r10a", "AAA,r10b",
            "BBB,r42a", "BBB,r42b",
            "CCC,r99a", "CCC,r99b",
        ]
        assert decoders[42].prefixes == ["BBB,"]

    def test_prefix_only(self, sample_catalog, quote_decoder):
        seen = []

        def open_quotes(entry):
            d = quote_decoder([""])
            seen.append(d)
            return d

        writer, _ = _writer("symbol,long_name")
        writer.write_combined_report(sample_catalog, open_quotes)
        assert seen[0].prefixes == ["AAA,Alpha Corp"]

    def test_quotes_only(self, sample_catalog, quote_decoder):
        seen = []

        def open_quotes(entry):
            d = quote_decoder(["x"])
            seen.append(d)
            return d

        writer, _ = _writer("date,close")
        writer.write_combined_report(sample_catalog, open_quotes)
        assert all(d.prefixes == [""] for d in seen)

    def test_header(self, sample_catalog, quote_decoder):
        writer, out = _writer("symbol,date,close")
        writer.write_combined_report(sample_catalog, lambda e: quote_decoder([]), header=True)
        assert out.getvalue() == "symbol,date,close\n"

    def test_skipped_entries_not_opened(self, sample_catalog, quote_decoder):
        opened = []

        def open_quotes(entry):
            opened.append(entry.identifier)
            return quote_decoder([])

        sample_catalog.get(42).skipped = True
        writer, _ = _writer("symbol,date")
        writer.write_combined_report(sample_catalog, open_quotes)
        assert opened == [10, 99]

    def test_missing_quote_file_stops(self, sample_catalog, quote_decoder):
        sample_catalog.get(42).quote_file_name = ""
        opened = []

        def open_quotes(entry):
            opened.append(entry.identifier)
            return quote_decoder(["row"])

        writer, out = _writer("symbol,date")
        with pytest.raises(NoQuoteFileError, match="F42") as exc_info:
            writer.write_combined_report(sample_catalog, open_quotes)
        assert exc_info.value.context["identifier"] == 42
        assert opened == [10]
        assert out.getvalue() == "AAA,row\n"

    def test_unusable_quote_file(self, sample_catalog, quote_decoder):
        writer, _ = _writer("symbol,date")
        with pytest.raises(SourceDataError, match="not usable"):
            writer.write_combined_report(sample_catalog, lambda e: quote_decoder([], count=-1))

    def test_interrupted_write_stops(self, sample_catalog, quote_decoder):
        opened = []

        def open_quotes(entry):
            opened.append(entry.identifier)
            return quote_decoder(["row"], result=-1)

        writer, _ = _writer("symbol,date")
        with pytest.raises(WriteInterruptedError):
            writer.write_combined_report(sample_catalog, open_quotes)
        assert opened == [10]

    def test_broken_pipe_from_decoder(self, sample_catalog, quote_decoder):
        writer = ReportWriter(_BrokenPipe(), FieldProjector(FieldSelection.from_format("date")))
        with pytest.raises(WriteInterruptedError):
            writer.write_combined_report(sample_catalog, lambda e: quote_decoder(["row"]))

    def test_nothing_selected_fails_before_output(self, sample_catalog, quote_decoder):
        writer, out = _writer("file_name")
        with pytest.raises(BadFormatError):
            writer.write_combined_report(sample_catalog, lambda e: quote_decoder([]), header=True)
        assert out.getvalue() == ""
