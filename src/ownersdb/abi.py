"""
ABI map loading.

The ABI map is the ``pr-hashes.json`` document produced by the CI build::

    {"zlib": {"abi": "4f1c..."}, "fmt": {"ABI": "9a0b..."}}
"""

import json
from pathlib import Path
from typing import Any

from .errors import ConfigError

AbiMap = dict[str, Any]


def load_abi_map(path: Path) -> AbiMap:
    """Load and validate an ABI map file.

    Raises:
        ConfigError: If the file is missing, is not valid JSON, or its
            top level is not an object.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"pr-hashes file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read pr-hashes file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Malformed JSON in pr-hashes file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(
            f"pr-hashes file {path} must contain a JSON object keyed by port name"
        )
    return data


def lookup_abi(abi_map: AbiMap, port: str) -> str | None:
    """Return the ABI hash for ``port``, or None if it has none.

    The lowercase ``abi`` key wins over ``ABI``. Empty values count as missing.
    """
    info = abi_map.get(port)
    if not isinstance(info, dict):
        return None
    abi = info.get("abi") or info.get("ABI")
    if not abi:
        return None
    return str(abi)
