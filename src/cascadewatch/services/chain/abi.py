"""ABI of the notification contract.

Only the two methods the dispatcher calls are described. An ABI file can
replace it via ``TOMB_ABI_PATH``.
"""

import json
from pathlib import Path
from typing import Any, Final

from cascadewatch.core.exceptions import ConfigurationError

TOMB_ABI: Final[list[dict[str, Any]]] = [
    {
        "type": "function",
        "name": "emitCascade",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "signal", "type": "string"},
            {"name": "royaltyBps", "type": "uint256"},
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "claimYield",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "signal", "type": "string"}],
        "outputs": [],
    },
]


def load_abi(path: Path | None = None) -> list[dict[str, Any]]:
    """Load the contract ABI from ``path``, or return the built-in ABI.

    Accepts either a bare ABI list or a compiler artifact with an ``abi`` key.

    Raises:
        ConfigurationError: If the file is missing or is not a valid ABI.
    """
    if path is None:
        return TOMB_ABI

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Cannot read contract ABI {path}: {e}") from e

    abi = data.get("abi") if isinstance(data, dict) else data
    if not isinstance(abi, list):
        raise ConfigurationError(f"Contract ABI {path} is not a JSON list")

    names = {entry.get("name") for entry in abi if entry.get("type") == "function"}
    missing = {"emitCascade", "claimYield"} - names
    if missing:
        raise ConfigurationError(f"Contract ABI {path} lacks: {', '.join(sorted(missing))}")
    return abi
