"""
Zip archive walker for cached package artifacts.

Every file entry of an archive becomes an installed path: separators are
normalized to ``/`` and a leading ``/`` is added.
"""

import io
import zipfile
from typing import Iterator

from .database import OwnersDatabase
from .errors import PackageFetchError


def iter_archive_paths(data: bytes) -> Iterator[str]:
    """Yield the installed path of every file entry in a zip archive.

    Raises:
        zipfile.BadZipFile: If ``data`` is not a zip archive.
    """
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        for info in zf.infolist():
            name = info.filename.replace("\\", "/")
            if info.is_dir() or name.endswith("/"):
                continue
            yield "/" + name


def index_archive(data: bytes, package: str, port: str, db: OwnersDatabase) -> int:
    """Add every file in the archive to ``db`` under ``package``.

    Entries are collected before touching ``db`` so an archive that turns
    out to be corrupt halfway does not leave partial records behind.

    Returns:
        Number of file records added.

    Raises:
        PackageFetchError: If the archive cannot be read.
    """
    try:
        paths = list(iter_archive_paths(data))
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, EOFError) as e:
        raise PackageFetchError(port, f"invalid archive: {e}") from e
    return db.extend(package, paths)
