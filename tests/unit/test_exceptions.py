"""Tests for metastock_catalog.core.exceptions."""

import pytest

from metastock_catalog.core.exceptions import (
    BadFormatError,
    ConfigurationError,
    DataIOError,
    InternalInconsistencyError,
    InvalidFormatTokenError,
    MetastockCatalogError,
    NoQuoteFileError,
    NotReferencedError,
    SourceDataError,
    WriteInterruptedError,
)


class TestExceptionHierarchy:
    """Verify the exception class hierarchy."""

    @pytest.mark.parametrize(
        "exc_class",
        [
            ConfigurationError,
            SourceDataError,
            DataIOError,
            InternalInconsistencyError,
            WriteInterruptedError,
        ],
    )
    def test_direct_subclasses(self, exc_class):
        assert issubclass(exc_class, MetastockCatalogError)

    def test_format_errors_are_configuration_errors(self):
        assert issubclass(BadFormatError, ConfigurationError)
        assert issubclass(InvalidFormatTokenError, ConfigurationError)

    def test_reference_errors_are_source_errors(self):
        assert issubclass(NotReferencedError, SourceDataError)
        assert issubclass(NoQuoteFileError, SourceDataError)

    def test_inconsistency_is_not_source_error(self):
        assert not issubclass(InternalInconsistencyError, SourceDataError)


class TestExceptionContext:
    """Verify context dict behavior."""

    def test_context_preserved(self):
        exc = NoQuoteFileError("no quote file found for F7", context={"identifier": 7})
        assert exc.context["identifier"] == 7
        assert str(exc) == "no quote file found for F7"

    def test_default_context_is_empty_dict(self):
        exc = DataIOError("read failed")
        assert exc.context == {}

    def test_catchable_as_base(self):
        with pytest.raises(MetastockCatalogError):
            raise InvalidFormatTokenError("unknown output format token: 'x'")
