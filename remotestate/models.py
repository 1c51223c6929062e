"""
Pydantic models shared by every backend initializer.

- RemoteState: the remote-state block a caller asks to initialize
- BackendSnapshot: the backend configuration the infrastructure tool last recorded
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import DecodeError

logger = logging.getLogger(__name__)


class RemoteState(BaseModel):
    """Requested remote state: a backend type plus its untyped configuration."""

    model_config = ConfigDict(frozen=True)

    backend: str
    config: Dict[str, Any] = Field(default_factory=dict)


class BackendSnapshot(BaseModel):
    """
    Last known backend configuration as recorded by the calling system.

    Read-only for this package: comparisons work on copies of ``config``.
    """

    model_config = ConfigDict(frozen=True)

    type: str
    config: Dict[str, Any] = Field(default_factory=dict)


def load_remote_state(path: Path) -> RemoteState:
    """
    Load a remote-state block from a JSON file.

    Args:
        path: File holding ``{"backend": ..., "config": {...}}``

    Returns:
        Parsed RemoteState

    Raises:
        DecodeError: If the file is not valid JSON or has the wrong shape
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return RemoteState.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        raise DecodeError(f"Invalid remote state file {path}: {e}") from e


def load_backend_snapshot(state_file: Path) -> Optional[BackendSnapshot]:
    """
    Read the backend snapshot from the infrastructure tool's local state file.

    Args:
        state_file: Path to the local state file (JSON)

    Returns:
        BackendSnapshot, or None if the file does not exist or records no backend

    Raises:
        DecodeError: If the file exists but cannot be parsed
    """
    state_file = Path(state_file)
    if not state_file.exists():
        logger.debug(f"No local state file at {state_file}")
        return None

    try:
        data = json.loads(state_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise DecodeError(f"Invalid state file {state_file}: {e}") from e

    backend = data.get("backend") if isinstance(data, dict) else None
    if not backend:
        return None

    try:
        return BackendSnapshot.model_validate(
            {"type": backend.get("type", ""), "config": backend.get("config") or {}}
        )
    except (AttributeError, ValidationError) as e:
        raise DecodeError(f"Invalid backend block in {state_file}: {e}") from e
