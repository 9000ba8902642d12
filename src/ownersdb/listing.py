"""
Local listing indexer.

Scans a directory of per-package installation listings
(``<port>_<version>_<triplet>.list``) and builds the owners database.

Each listing line is an installed path, optionally preceded by a
non-path segment (``x64-windows/include/zlib.h``). Lines ending in ``/``
are directories and are ignored.
"""

from pathlib import Path
from typing import Iterator

import structlog

from .database import IndexResult, OwnersDatabase, package_id
from .errors import ListingScanError
from .logging import HumanLog

logger = structlog.get_logger()

__all__ = [
    "LISTING_SUFFIX",
    "LocalListingIndexer",
    "iter_listing_paths",
    "list_listing_files",
    "listing_package_id",
]

LISTING_SUFFIX = ".list"


def list_listing_files(listing_dir: Path) -> list[str]:
    """Return the listing file names in ``listing_dir``, hidden files excluded.

    Names are sorted so the output is stable for a given directory.

    Raises:
        ListingScanError: If the directory cannot be read.
    """
    try:
        names = [entry.name for entry in Path(listing_dir).iterdir()]
    except OSError as e:
        raise ListingScanError(f"Cannot read listing directory {listing_dir}: {e}") from e
    return sorted(name for name in names if not name.startswith("."))


def listing_package_id(file_name: str) -> str:
    """Derive the package identifier from a listing file name.

    ``zlib_1.3.1_x64-windows.list`` -> ``zlib:x64-windows``

    Raises:
        ListingScanError: If the name has fewer than three ``_`` components.
    """
    components = file_name.split("_")
    if len(components) < 3:
        raise ListingScanError(
            f"Listing file name does not match <port>_<version>_<triplet>.list: {file_name}"
        )
    qualifier = components[2].replace(LISTING_SUFFIX, "")
    return package_id(components[0], qualifier)


def iter_listing_paths(content: str) -> Iterator[str]:
    """Yield the installed file paths found in a listing body.

    Empty lines and directory entries (ending in ``/``) are skipped.
    Everything before the first ``/`` is dropped; a line without any
    ``/`` is yielded as-is.
    """
    for raw in content.split("\n"):
        line = raw.strip()
        if not line:
            continue
        if line.endswith("/"):
            continue
        idx = line.find("/")
        yield line[idx:] if idx >= 0 else line


class LocalListingIndexer:
    """Builds the owners database from an on-disk listing directory."""

    def __init__(self, listing_dir: Path):
        self.listing_dir = Path(listing_dir)
        self.log = logger.bind(component="local_indexer", listing_dir=str(self.listing_dir))
        self.hlog = HumanLog(self.log)

    def run(self) -> IndexResult:
        """Scan every listing file and return the accumulated result.

        Raises:
            ListingScanError: On any file-system or decoding error. Nothing
                is returned in that case, so no partial database is written.
        """
        files = list_listing_files(self.listing_dir)
        self.hlog.scan_start(str(self.listing_dir), len(files))

        result = IndexResult(database=OwnersDatabase())
        for name in files:
            count = self._index_file(name, result.database)
            result.indexed.append(name)
            self.log.debug("local.file_indexed", file=name, records=count)

        return result

    def _index_file(self, name: str, db: OwnersDatabase) -> int:
        package = listing_package_id(name)
        path = self.listing_dir / name
        try:
            # newline="" keeps lone \r inside lines; only \n and \r\n end a line
            with open(path, "r", encoding="utf-8", newline="") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ListingScanError(f"Cannot read listing file {path}: {e}") from e
        return db.extend(package, iter_listing_paths(content))
