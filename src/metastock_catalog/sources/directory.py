"""Directory scanner and raw file access for a MetaStock data directory."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from metastock_catalog.core.exceptions import DataIOError
from metastock_catalog.core.models import MAX_IDENTIFIER, Identifier, IndexKind
from metastock_catalog.core.reporting import diagnostics

logger = logging.getLogger(__name__)

_QUOTE_FILE_RE = re.compile(r"^[Ff]([1-9][0-9]*)\.(?:MWD|DAT)$", re.IGNORECASE)
_INDEX_NAMES = {kind.file_name: kind for kind in IndexKind}


def parse_quote_file_name(name: str) -> Identifier | None:
    """Return the file number encoded in ``F<n>.DAT``/``F<n>.MWD``, else None."""
    match = _QUOTE_FILE_RE.match(name)
    if match is None:
        return None
    return int(match.group(1))


@dataclass
class DirectoryListing:
    """Files of interest found in one directory scan."""

    index_files: dict[IndexKind, str] = field(default_factory=dict)
    quote_files: dict[Identifier, str] = field(default_factory=dict)

    def has_index(self, kind: IndexKind) -> bool:
        return kind in self.index_files


class MetastockDirectory:
    """Read-only access to the files of one MetaStock directory.

    Quote files are read into a single scratch buffer that is reused and
    grown across calls; the returned view is only valid until the next
    ``read_quote_file()``.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)
        self._buffer = bytearray()
        self._listing: DirectoryListing | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def listing(self) -> DirectoryListing:
        if self._listing is None:
            self._listing = self.scan()
        return self._listing

    def scan(self) -> DirectoryListing:
        """Enumerate the directory (not recursive) and classify file names."""
        try:
            names = sorted(
                entry.name for entry in os.scandir(self._path) if entry.is_file()
            )
        except OSError as e:
            raise DataIOError(
                f"{self._path}: {e.strerror or e}",
                context={"path": str(self._path)},
            ) from e

        listing = DirectoryListing()
        for name in names:
            number = parse_quote_file_name(name)
            if number is not None:
                self._add_quote_file(listing, number, name)
                continue
            kind = _INDEX_NAMES.get(name.upper())
            if kind is None:
                continue
            if kind in listing.index_files:
                diagnostics.warning(
                    "%s: both %s and %s present, using %s",
                    self._path, listing.index_files[kind], name,
                    listing.index_files[kind],
                )
                continue
            listing.index_files[kind] = name

        logger.info(
            "Scanned %s: %d index files, %d quote files",
            self._path, len(listing.index_files), len(listing.quote_files),
        )
        self._listing = listing
        return listing

    def _add_quote_file(
        self, listing: DirectoryListing, number: Identifier, name: str
    ) -> None:
        if number > MAX_IDENTIFIER:
            diagnostics.warning("%s: file number out of range, ignored", name)
            return
        if number in listing.quote_files:
            diagnostics.warning(
                "%s: duplicates %s, ignored", name, listing.quote_files[number]
            )
            return
        listing.quote_files[number] = name

    def read_index(self, kind: IndexKind) -> bytes | None:
        """Raw bytes of an index file, or None when it is absent."""
        name = self.listing.index_files.get(kind)
        if name is None:
            return None
        file_path = self._path / name
        try:
            data = file_path.read_bytes()
        except OSError as e:
            raise DataIOError(
                f"{file_path}: {e.strerror or e}", context={"path": str(file_path)}
            ) from e
        logger.debug("read %s: %d bytes", file_path, len(data))
        return data

    def read_quote_file(self, name: str) -> memoryview:
        """Read a quote file into the shared scratch buffer."""
        file_path = self._path / name
        try:
            with open(file_path, "rb") as f:
                size = os.fstat(f.fileno()).st_size
                if size > len(self._buffer):
                    # Views handed out earlier keep the old buffer alive.
                    self._buffer = bytearray(size)
                view = memoryview(self._buffer)
                n = f.readinto(view[:size])
        except OSError as e:
            raise DataIOError(
                f"{file_path}: {e.strerror or e}", context={"path": str(file_path)}
            ) from e
        logger.debug("read %s: %d bytes", file_path, n)
        return view[:n]

    def modification_time(self, name: str) -> datetime:
        file_path = self._path / name
        try:
            return datetime.fromtimestamp(file_path.stat().st_mtime)
        except OSError as e:
            raise DataIOError(
                f"{file_path}: {e.strerror or e}", context={"path": str(file_path)}
            ) from e
