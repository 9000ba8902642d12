"""
Error hierarchy for ownersdb.

Every fatal condition is raised as an OwnersDBError subclass carrying the
process exit code the CLI driver should use. Indexing code never calls
sys.exit() itself.
"""

EXIT_SUCCESS = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


class OwnersDBError(Exception):
    """Base error for ownersdb operations."""

    exit_code: int = EXIT_FAILED


class ConfigError(OwnersDBError):
    """Invalid configuration or input document (config file, ABI map)."""

    exit_code = EXIT_USAGE


class ListingScanError(OwnersDBError):
    """The listing directory or one of its files could not be read."""

    exit_code = EXIT_FAILED


class DiffError(OwnersDBError):
    """git diff failed or git is not available."""

    exit_code = EXIT_USAGE


class BlobURLError(OwnersDBError):
    """The blob storage base URL cannot be parsed."""

    exit_code = EXIT_USAGE


class PackageFetchError(OwnersDBError):
    """A single package archive could not be downloaded or opened.

    Recoverable: the remote indexer logs it and moves to the next port.
    """

    def __init__(self, port: str, reason: str):
        self.port = port
        self.reason = reason
        super().__init__(f"{port}: {reason}")
