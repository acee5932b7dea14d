"""metastock_catalog.sources: directory access and decoder protocols."""

from metastock_catalog.sources.directory import (
    DirectoryListing,
    MetastockDirectory,
    parse_quote_file_name,
)
from metastock_catalog.sources.protocols import (
    DecoderSet,
    IndexDecoder,
    QuoteDecoder,
    load_decoder_set,
)

__all__ = [
    "DirectoryListing",
    "MetastockDirectory",
    "parse_quote_file_name",
    "DecoderSet",
    "IndexDecoder",
    "QuoteDecoder",
    "load_decoder_set",
]
