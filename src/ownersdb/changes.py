"""
Change detection: ports touched by the current branch.

Runs ``git diff --name-only <target>...HEAD -- ports/`` and reduces the
changed paths to the set of port names, in first-seen order.
"""

import re
import subprocess
from pathlib import Path

import structlog

from .errors import DiffError

logger = structlog.get_logger()

__all__ = [
    "DEFAULT_PORTS_DIR",
    "DEFAULT_TARGET_BRANCH",
    "changed_ports",
    "diff_range",
    "ports_from_paths",
]

DEFAULT_TARGET_BRANCH = "master"
DEFAULT_PORTS_DIR = "ports"


def diff_range(target_branch: str) -> str:
    """Three-dot range against HEAD (changes since the merge base)."""
    return f"{target_branch}...HEAD"


def ports_from_paths(paths: list[str], ports_dir: str = DEFAULT_PORTS_DIR) -> list[str]:
    """Extract distinct port names from repository-relative paths.

    ``ports/zlib/portfile.cmake`` -> ``zlib``. Paths outside ``ports_dir``
    are ignored. Order follows the first occurrence of each port.
    """
    pattern = re.compile(rf"^{re.escape(ports_dir)}/([^/]+)")
    seen: dict[str, None] = {}
    for path in paths:
        match = pattern.match(path.strip())
        if match:
            seen.setdefault(match.group(1), None)
    return list(seen)


def changed_ports(
    target_branch: str = DEFAULT_TARGET_BRANCH,
    repo_root: Path | str | None = None,
    ports_dir: str = DEFAULT_PORTS_DIR,
) -> list[str]:
    """Return the ports changed between ``target_branch`` and HEAD.

    Args:
        target_branch: Branch or revision to diff against.
        repo_root: Directory git runs in. None = cwd.
        ports_dir: Top-level directory holding the ports.

    Returns:
        Port names in first-seen order. Empty if nothing under ports_dir changed.

    Raises:
        DiffError: If git is missing or the diff command fails.
    """
    git_range = diff_range(target_branch)
    cmd = ["git", "diff", "--name-only", git_range, "--", f"{ports_dir}/"]
    logger.debug("git.diff.start", cmd=cmd, cwd=str(repo_root) if repo_root else None)

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            cwd=repo_root,
        )
    except (FileNotFoundError, OSError) as e:
        raise DiffError(f"git diff failed for range {git_range}: {e}") from e

    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        raise DiffError(
            f"git diff failed for range {git_range} (exit {result.returncode}): {stderr[:500]}"
        )

    paths = [line for line in result.stdout.splitlines() if line]
    ports = ports_from_paths(paths, ports_dir)
    logger.debug("git.diff.complete", range=git_range, files=len(paths), ports=len(ports))
    return ports
