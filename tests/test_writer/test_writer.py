"""
Tests for OwnersDatabase and the output writer.

Covers:
- package_id / OwnersDatabase.add (header rule, duplicates)
- render_lines (trailing newline only when non-empty)
- write_databases (directory creation, overwrite, zero-byte files)
"""

from pathlib import Path

import pytest

from ownersdb.database import IndexResult, OwnersDatabase, package_id
from ownersdb.writer import (
    DATABASE_FILENAME,
    DEFAULT_OUT_DIR,
    HEADERS_FILENAME,
    render_lines,
    write_databases,
)


@pytest.fixture
def db() -> OwnersDatabase:
    d = OwnersDatabase()
    d.add("zlib:x64-windows", "/include/zlib.h")
    d.add("zlib:x64-windows", "/share/zlib/copyright")
    return d


class TestOwnersDatabase:
    def test_package_id(self) -> None:
        assert package_id("zlib", "installed") == "zlib:installed"

    def test_include_path_adds_header(self, db: OwnersDatabase) -> None:
        assert db.records == [
            "zlib:x64-windows:/include/zlib.h",
            "zlib:x64-windows:/share/zlib/copyright",
        ]
        assert db.headers == ["zlib:x64-windows:zlib.h"]

    def test_include_without_trailing_slash_is_not_header(self) -> None:
        d = OwnersDatabase()
        d.add("a:installed", "/include")
        d.add("a:installed", "/lib/include/x.h")
        assert d.headers == []

    def test_nested_header_path(self) -> None:
        d = OwnersDatabase()
        d.add("boost:installed", "/include/boost/asio/ip/tcp.hpp")
        assert d.headers == ["boost:installed:boost/asio/ip/tcp.hpp"]

    def test_duplicates_are_kept(self) -> None:
        d = OwnersDatabase()
        d.add("a:b", "/include/x.h")
        d.add("a:b", "/include/x.h")
        assert len(d.records) == 2
        assert len(d.headers) == 2

    def test_extend_returns_count(self) -> None:
        d = OwnersDatabase()
        assert d.extend("a:b", iter(["/x", "/y"])) == 2
        assert len(d) == 2

    def test_index_result_totals(self, db: OwnersDatabase) -> None:
        result = IndexResult(database=db)
        assert result.total_records == 2
        assert result.total_headers == 1


class TestRenderLines:
    def test_empty_renders_empty_string(self) -> None:
        assert render_lines([]) == ""

    def test_trailing_newline(self) -> None:
        assert render_lines(["a", "b"]) == "a\nb\n"


class TestWriteDatabases:
    def test_default_location(self) -> None:
        assert DEFAULT_OUT_DIR == Path("scripts") / "list_files"
        assert DATABASE_FILENAME == "VCPKGDatabase.txt"
        assert HEADERS_FILENAME == "VCPKGHeadersDatabase.txt"

    def test_writes_both_files(self, tmp_path: Path, db: OwnersDatabase) -> None:
        written = write_databases(db, tmp_path)
        assert written.database == tmp_path / DATABASE_FILENAME
        assert written.headers == tmp_path / HEADERS_FILENAME
        assert written.database.read_bytes() == (
            b"zlib:x64-windows:/include/zlib.h\nzlib:x64-windows:/share/zlib/copyright\n"
        )
        assert written.headers.read_bytes() == b"zlib:x64-windows:zlib.h\n"

    def test_creates_nested_directory(self, tmp_path: Path, db: OwnersDatabase) -> None:
        out = tmp_path / "a" / "b" / "c"
        write_databases(db, out)
        assert (out / DATABASE_FILENAME).exists()

    def test_empty_database_gives_zero_byte_files(self, tmp_path: Path) -> None:
        written = write_databases(OwnersDatabase(), tmp_path)
        assert written.database.stat().st_size == 0
        assert written.headers.stat().st_size == 0

    def test_overwrites_previous_content(self, tmp_path: Path, db: OwnersDatabase) -> None:
        write_databases(db, tmp_path)
        write_databases(OwnersDatabase(), tmp_path)
        assert (tmp_path / DATABASE_FILENAME).read_text(encoding="utf-8") == ""

    def test_custom_file_names(self, tmp_path: Path, db: OwnersDatabase) -> None:
        written = write_databases(db, tmp_path, database_name="db.txt", headers_name="h.txt")
        assert written.database.name == "db.txt"
        assert written.headers.read_text(encoding="utf-8") == "zlib:x64-windows:zlib.h\n"
