"""
Remote cache indexer.

Indexes the prebuilt archives of the ports changed on the current branch:

1. ``git diff`` against the target branch -> changed ports
2. ABI map lookup -> ``<abi>.zip`` blob URL
3. Download and walk the zip archive -> ``<port>:installed:<path>`` records

Per-port problems (no ABI, HTTP error, corrupt archive) are logged as
warnings and the port is skipped. Diff failures and a malformed base URL
abort the run.
"""

from dataclasses import dataclass
from pathlib import Path

import structlog

from .abi import AbiMap, lookup_abi
from .archive import index_archive
from .blob import BlobFetcher, build_blob_url, redact_url, validate_base_url
from .changes import DEFAULT_PORTS_DIR, DEFAULT_TARGET_BRANCH, changed_ports, diff_range
from .database import INSTALLED_QUALIFIER, IndexResult, OwnersDatabase, package_id
from .errors import PackageFetchError
from .logging import HumanLog

logger = structlog.get_logger()

__all__ = [
    "CacheIndexer",
    "CacheRequest",
]


@dataclass(frozen=True)
class CacheRequest:
    """Resolved inputs of one remote indexing run."""

    abi_map: AbiMap
    blob_base_url: str
    target_branch: str = DEFAULT_TARGET_BRANCH
    repo_root: Path | None = None
    ports_dir: str = DEFAULT_PORTS_DIR


class CacheIndexer:
    """Builds the owners database from cached archives of changed ports."""

    def __init__(self, request: CacheRequest, fetcher: BlobFetcher):
        self.request = request
        self.fetcher = fetcher
        self.log = logger.bind(component="cache_indexer")
        self.hlog = HumanLog(self.log)

    def run(self) -> IndexResult:
        """Index every changed port.

        Returns:
            IndexResult. ``indexed`` lists the ports whose archive was
            indexed and ``skipped`` maps skipped ports to the reason.

        Raises:
            DiffError: If git diff fails.
            BlobURLError: If the blob base URL is malformed.
        """
        req = self.request
        result = IndexResult(database=OwnersDatabase())

        ports = changed_ports(req.target_branch, req.repo_root, req.ports_dir)
        if not ports:
            self.hlog.no_changes(diff_range(req.target_branch), req.ports_dir)
            return result

        self.hlog.changed_ports(ports)
        validate_base_url(req.blob_base_url)

        for port in ports:
            try:
                count = self._index_port(port, result.database)
            except PackageFetchError as e:
                self.log.warning("cache.port.skipped", port=port, reason=e.reason)
                result.skipped[port] = e.reason
                continue
            result.indexed.append(port)
            self.hlog.port_indexed(port, count)

        return result

    def _index_port(self, port: str, db: OwnersDatabase) -> int:
        abi = lookup_abi(self.request.abi_map, port)
        if abi is None:
            raise PackageFetchError(port, "no ABI found in pr-hashes")

        url = build_blob_url(self.request.blob_base_url, abi)
        self.hlog.download(port, redact_url(url))
        data = self.fetcher.fetch(port, url)
        return index_archive(data, package_id(port, INSTALLED_QUALIFIER), port, db)
