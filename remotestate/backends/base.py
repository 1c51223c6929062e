"""Base classes for remote state backend initializers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from ..models import BackendSnapshot, RemoteState


class InitializationState(str, Enum):
    """Decision and progress of one backend initialization."""
    NOT_NEEDED = "not_needed"
    NEEDED = "needed"
    PROVISIONING = "provisioning"
    DONE = "done"
    FAILED = "failed"


@dataclass
class InitializationResult:
    """
    Outcome of a backend initialization.

    Attributes:
        backend: Backend type that was initialized
        state: Final state (DONE on success)
        created: Human-readable identities of resources created by this call
    """

    backend: str
    state: InitializationState = InitializationState.DONE
    created: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "backend": self.backend,
            "state": self.state.value,
            "created": list(self.created),
        }


class BackendInitializer(ABC):
    """
    Provisions and validates the storage behind one kind of remote state backend.

    Subclasses implement ``decide``, ``initialize`` and ``get_backend_init_args``;
    callers dispatch to them by backend type and persist the new backend
    snapshot after ``initialize`` succeeds.
    """

    backend_type: str = ""

    @abstractmethod
    async def decide(
        self, remote_state: RemoteState, existing: Optional[BackendSnapshot]
    ) -> InitializationState:
        """Return NEEDED if ``initialize`` must run before the backend is used, else NOT_NEEDED."""
        pass

    async def needs_initialization(
        self, remote_state: RemoteState, existing: Optional[BackendSnapshot]
    ) -> bool:
        """Decide whether ``initialize`` must run before the backend is used."""
        return await self.decide(remote_state, existing) is InitializationState.NEEDED

    @abstractmethod
    async def initialize(self, remote_state: RemoteState) -> InitializationResult:
        """Create whatever the backend needs; safe to call repeatedly."""
        pass

    @abstractmethod
    def get_backend_init_args(self, config: Mapping[str, Any]) -> Dict[str, Any]:
        """Return the configuration to forward to the tool's native backend block."""
        pass
