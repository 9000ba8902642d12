"""
In-memory owners database.

Holds the two record sequences produced by an indexer run:

- ``records``: every ``<package>:<qualifier>:<path>`` line
- ``headers``: the subset under ``/include/``, with that prefix stripped

Records keep insertion order and duplicates are preserved.
"""

from dataclasses import dataclass, field

INCLUDE_PREFIX = "/include/"
INSTALLED_QUALIFIER = "installed"


def package_id(name: str, qualifier: str) -> str:
    """Build a package identifier (``zlib:x64-windows``)."""
    return f"{name}:{qualifier}"


@dataclass
class OwnersDatabase:
    """Accumulates file and header records for one invocation."""

    records: list[str] = field(default_factory=list)
    headers: list[str] = field(default_factory=list)

    def add(self, package: str, path: str) -> None:
        """Record that ``package`` owns ``path``.

        Paths under ``/include/`` are also added to the headers sequence,
        relative to the include root.
        """
        self.records.append(f"{package}:{path}")
        if path.startswith(INCLUDE_PREFIX):
            self.headers.append(f"{package}:{path[len(INCLUDE_PREFIX):]}")

    def extend(self, package: str, paths) -> int:
        """Add every path in ``paths`` for ``package``. Returns how many were added."""
        count = 0
        for path in paths:
            self.add(package, path)
            count += 1
        return count

    def __len__(self) -> int:
        return len(self.records)


@dataclass
class IndexResult:
    """Outcome of an indexer run, handed back to the CLI driver."""

    database: OwnersDatabase = field(default_factory=OwnersDatabase)
    indexed: list[str] = field(default_factory=list)
    skipped: dict[str, str] = field(default_factory=dict)

    @property
    def total_records(self) -> int:
        return len(self.database.records)

    @property
    def total_headers(self) -> int:
        return len(self.database.headers)
