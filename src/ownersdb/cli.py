"""
Main CLI for ownersdb using Click.

Two commands share one output contract:

    ownersdb local <listing-dir>           index installed-file listings
    ownersdb cache --pr-hashes ... ...     index cached archives of changed ports

The indexers return results or raise OwnersDBError; this module is the
only place that turns them into process exit codes.
"""

import sys
from pathlib import Path
from typing import Any, Callable

import click

from . import __version__
from .abi import load_abi_map
from .blob import BlobFetcher
from .config import AppConfig, load_config
from .database import IndexResult
from .errors import EXIT_FAILED, EXIT_SUCCESS, OwnersDBError
from .listing import LocalListingIndexer
from .logging import HumanLog, configure_logging, get_logger
from .remote import CacheIndexer, CacheRequest
from .writer import WrittenDatabases, write_databases

EXIT_INTERRUPTED = 130

_MAX_LEGACY_ARGS = 3


def _common_options(func: Callable) -> Callable:
    """Options shared by every command (config file and logging)."""
    options = [
        click.option(
            "-c",
            "--config",
            "config_path",
            type=click.Path(path_type=Path),
            default=None,
            help="Path to the YAML configuration file",
        ),
        click.option(
            "-v",
            "--verbose",
            count=True,
            help="Verbosity level (-v, -vv for more detail)",
        ),
        click.option(
            "--log-level",
            type=click.Choice(["debug", "info", "human", "warn", "error"]),
            default=None,
            help="Explicit logging level",
        ),
        click.option(
            "--log-file",
            type=click.Path(path_type=Path),
            default=None,
            help="File to save structured logs (JSON)",
        ),
        click.option(
            "--quiet",
            is_flag=True,
            default=False,
            help="Quiet mode (errors only)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _setup(cli_args: dict[str, Any]) -> AppConfig:
    """Load configuration and configure logging. Raises ConfigError."""
    config = load_config(config_path=cli_args.get("config_path"), cli_args=cli_args)
    configure_logging(config.logging, quiet=cli_args.get("quiet", False))
    return config


def _write_output(result: IndexResult, config: AppConfig) -> WrittenDatabases:
    written = write_databases(
        result.database,
        config.output.dir,
        database_name=config.output.database_name,
        headers_name=config.output.headers_name,
    )
    HumanLog(get_logger(__name__)).written(
        database=str(written.database),
        headers=str(written.headers),
        records=result.total_records,
        header_records=result.total_headers,
    )
    return written


def _run_command(action: Callable[[], int], verbose: int = 0) -> None:
    """Run a command body and exit with its code, mapping errors to exit codes."""
    try:
        exit_code = action()
    except KeyboardInterrupt:
        click.echo("\nInterrupted.", err=True)
        sys.exit(EXIT_INTERRUPTED)
    except OwnersDBError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(e.exit_code)
    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        if verbose > 1:
            import traceback
            traceback.print_exc()
        sys.exit(EXIT_FAILED)
    sys.exit(exit_code)


def resolve_cache_arguments(
    legacy_args: tuple[str, ...],
    pr_hashes: Path | None,
    blob_base_url: str | None,
    target_branch: str | None,
    out_dir: Path | None,
) -> tuple[Path, str, str | None]:
    """Resolve the cache command arguments from either supported form.

    Legacy:  <pr-hashes.json> <blob-base-url> [target-branch]
    Flagged: --pr-hashes FILE --blob-base-url URL [--target-branch B] [--out-dir D]

    Returns:
        (pr_hashes, blob_base_url, target_branch). target_branch is None
        when not given, so configuration defaults apply.

    Raises:
        click.UsageError: If the forms are mixed, too many positionals are
            given, or a required value is missing.
    """
    flags_used = any(v is not None for v in (pr_hashes, blob_base_url, target_branch, out_dir))

    if legacy_args:
        if flags_used:
            raise click.UsageError(
                "Use either positional arguments or --pr-hashes/--blob-base-url/"
                "--target-branch/--out-dir, not both."
            )
        if len(legacy_args) > _MAX_LEGACY_ARGS:
            raise click.UsageError(
                f"Too many positional arguments ({len(legacy_args)}); "
                "expected <pr-hashes.json> <blob-base-url> [target-branch]."
            )
        if len(legacy_args) < 2:
            raise click.UsageError(
                "Missing <blob-base-url>; expected <pr-hashes.json> <blob-base-url> [target-branch]."
            )
        branch = legacy_args[2] if len(legacy_args) == 3 else None
        return Path(legacy_args[0]), legacy_args[1], branch or None

    if pr_hashes is None:
        raise click.UsageError("Missing option '--pr-hashes'.")
    if not blob_base_url:
        raise click.UsageError("Missing option '--blob-base-url'.")
    return pr_hashes, blob_base_url, target_branch or None


@click.group()
@click.version_option(version=__version__, prog_name="ownersdb")
def main() -> None:
    """ownersdb - Build file-ownership databases for port packages.

    Produces VCPKGDatabase.txt (every installed file) and
    VCPKGHeadersDatabase.txt (headers, relative to include/), each line
    being <port>:<qualifier>:<path>.
    """
    pass


@main.command("local")
@click.argument("listing_dir", type=click.Path(path_type=Path))
@click.option(
    "--out-dir",
    type=click.Path(path_type=Path),
    default=None,
    help="Output directory (default: scripts/list_files)",
)
@_common_options
def local(listing_dir: Path, **kwargs) -> None:
    """Index the installed-file listings in LISTING_DIR.

    LISTING_DIR holds one <port>_<version>_<triplet>.list file per
    installed package (the package manager's installed/info directory).

    Examples:

        \b
        $ ownersdb local installed/vcpkg/info
        $ ownersdb local installed/vcpkg/info --out-dir out/
    """

    def action() -> int:
        config = _setup(kwargs)
        result = LocalListingIndexer(listing_dir).run()
        _write_output(result, config)
        return EXIT_SUCCESS

    _run_command(action, kwargs.get("verbose", 0))


@main.command("cache")
@click.argument("legacy_args", nargs=-1, metavar="[PR_HASHES BLOB_BASE_URL [TARGET_BRANCH]]")
@click.option(
    "--pr-hashes",
    type=click.Path(path_type=Path),
    default=None,
    help="JSON map of port name to {'abi': <hash>}",
)
@click.option(
    "--blob-base-url",
    default=None,
    help="Blob container URL, SAS token included (https://<acct>.blob.core.windows.net/<container>/?<sas>)",
)
@click.option(
    "--target-branch",
    default=None,
    help="Branch to diff HEAD against (default: master)",
)
@click.option(
    "--out-dir",
    type=click.Path(path_type=Path),
    default=None,
    help="Output directory (default: scripts/list_files)",
)
@_common_options
def cache(legacy_args: tuple[str, ...], **kwargs) -> None:
    """Index cached archives of the ports changed on this branch.

    Ports are taken from `git diff --name-only <target>...HEAD -- ports/`.
    Each port's archive <abi>.zip is downloaded from the blob container
    and its entries are recorded as <port>:installed:<path>.

    Examples:

        \b
        $ ownersdb cache --pr-hashes pr-hashes.json \\
            --blob-base-url "https://acct.blob.core.windows.net/cache/?sv=..."

        \b
        # Legacy positional form
        $ ownersdb cache pr-hashes.json "https://acct.blob.core.windows.net/cache/?sv=..." main
    """
    pr_hashes, blob_base_url, target_branch = resolve_cache_arguments(
        legacy_args,
        kwargs.pop("pr_hashes"),
        kwargs.pop("blob_base_url"),
        kwargs.pop("target_branch"),
        kwargs.get("out_dir"),
    )
    kwargs["target_branch"] = target_branch

    def action() -> int:
        config = _setup(kwargs)
        abi_map = load_abi_map(pr_hashes)
        request = CacheRequest(
            abi_map=abi_map,
            blob_base_url=blob_base_url,
            target_branch=config.cache.target_branch,
            repo_root=config.cache.repo_root,
            ports_dir=config.cache.ports_dir,
        )
        with BlobFetcher(timeout=config.cache.timeout) as fetcher:
            result = CacheIndexer(request, fetcher).run()

        _write_output(result, config)
        if result.skipped:
            HumanLog(get_logger(__name__)).skipped_summary(list(result.skipped))
        return EXIT_SUCCESS

    _run_command(action, kwargs.get("verbose", 0))


if __name__ == "__main__":
    main()
