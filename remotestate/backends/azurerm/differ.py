"""
Differ for azurerm backend configuration.

Compares the configuration a caller requests against the backend snapshot the
infrastructure tool last recorded, to tell whether the remote state target
has changed.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from ...models import BackendSnapshot
from .config import filter_tool_only_keys

logger = logging.getLogger(__name__)

BACKEND_TYPE = "azurerm"

_TRUE_STRINGS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_STRINGS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def parse_bool(value: str) -> bool:
    """
    Parse the boolean spellings a string-typed state file may contain.

    Raises:
        ValueError: If ``value`` is not a recognized boolean spelling
    """
    if value in _TRUE_STRINGS:
        return True
    if value in _FALSE_STRINGS:
        return False
    raise ValueError(f"invalid boolean: {value!r}")


def normalize_snapshot_config(
    stored: Mapping[str, Any], requested: Mapping[str, Any]
) -> Dict[str, Any]:
    """
    Build a comparison copy of a stored backend config.

    Stored strings are coerced to booleans where the requested value at the
    same key is a boolean, and null attributes the request does not set are
    dropped. ``stored`` is left untouched.
    """
    normalized: Dict[str, Any] = {}
    for key, value in stored.items():
        if value is None and key not in requested:
            continue
        if isinstance(value, str) and isinstance(requested.get(key), bool):
            try:
                value = parse_bool(value)
            except ValueError:
                pass  # left as a string, compares unequal
        normalized[key] = value
    return normalized


def values_equal(left: Any, right: Any) -> bool:
    """
    Deep equality that also requires matching types for booleans.

    ``True == 1`` in Python, but a stored ``1`` is not the boolean a request
    sets, so a bool only equals another bool.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, Mapping) or isinstance(right, Mapping):
        if not (isinstance(left, Mapping) and isinstance(right, Mapping)):
            return False
        if left.keys() != right.keys():
            return False
        return all(values_equal(left[key], right[key]) for key in left)
    if isinstance(left, (list, tuple)) or isinstance(right, (list, tuple)):
        if not (isinstance(left, (list, tuple)) and isinstance(right, (list, tuple))):
            return False
        if len(left) != len(right):
            return False
        return all(values_equal(a, b) for a, b in zip(left, right))
    return left == right


def configs_equal(config: Mapping[str, Any], existing: Optional[BackendSnapshot]) -> bool:
    """
    Check whether the requested config matches the recorded backend.

    Args:
        config: Requested azurerm backend configuration, tool-only keys included
        existing: Recorded backend snapshot, or None if no backend was configured

    Returns:
        True if the remote state target is unchanged
    """
    if existing is None:
        return len(config) == 0

    if existing.type != BACKEND_TYPE:
        logger.debug(f"Backend type has changed from {BACKEND_TYPE} to {existing.type}")
        return False

    comparison_config = filter_tool_only_keys(config)
    stored_config = normalize_snapshot_config(existing.config, comparison_config)

    if not values_equal(stored_config, comparison_config):
        logger.debug(f"Backend config changed from {existing.config} to {comparison_config}")
        return False

    return True
