"""
Output writer for the owners databases.

Writes ``VCPKGDatabase.txt`` and ``VCPKGHeadersDatabase.txt``. Each file is
the records joined by newlines, with a trailing newline only when there is
at least one record. Existing files are overwritten.
"""

from dataclasses import dataclass
from pathlib import Path

import structlog

from .database import OwnersDatabase

logger = structlog.get_logger()

__all__ = [
    "DATABASE_FILENAME",
    "DEFAULT_OUT_DIR",
    "HEADERS_FILENAME",
    "WrittenDatabases",
    "render_lines",
    "write_databases",
]

DEFAULT_OUT_DIR = Path("scripts") / "list_files"
DATABASE_FILENAME = "VCPKGDatabase.txt"
HEADERS_FILENAME = "VCPKGHeadersDatabase.txt"


@dataclass(frozen=True)
class WrittenDatabases:
    """Paths of the two files produced by write_databases()."""

    database: Path
    headers: Path


def render_lines(lines: list[str]) -> str:
    """Join records with newlines. Empty input renders as an empty string."""
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def write_databases(
    db: OwnersDatabase,
    out_dir: Path = DEFAULT_OUT_DIR,
    database_name: str = DATABASE_FILENAME,
    headers_name: str = HEADERS_FILENAME,
) -> WrittenDatabases:
    """Write both databases to ``out_dir``, creating it if needed.

    Args:
        db: Accumulated records.
        out_dir: Output directory.
        database_name: File name of the full database.
        headers_name: File name of the headers-only database.

    Returns:
        WrittenDatabases with the paths written.
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    database_path = out_dir / database_name
    headers_path = out_dir / headers_name

    # newline="" keeps "\n" as-is on Windows
    with open(database_path, "w", encoding="utf-8", newline="") as f:
        f.write(render_lines(db.records))
    with open(headers_path, "w", encoding="utf-8", newline="") as f:
        f.write(render_lines(db.headers))

    logger.debug(
        "output.files_written",
        database=str(database_path),
        headers=str(headers_path),
        records=len(db.records),
        header_records=len(db.headers),
    )
    return WrittenDatabases(database=database_path, headers=headers_path)
