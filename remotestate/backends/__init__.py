"""
Remote state backend initializers, looked up by backend type.
"""

from typing import Any, Dict, Type

from ..errors import UnsupportedBackendError
from .azurerm import AzureRMInitializer
from .base import BackendInitializer, InitializationResult, InitializationState

_INITIALIZERS: Dict[str, Type[BackendInitializer]] = {
    AzureRMInitializer.backend_type: AzureRMInitializer,
}


def register_initializer(backend_type: str, initializer_cls: Type[BackendInitializer]) -> None:
    """Register the initializer class for a backend type."""
    _INITIALIZERS[backend_type] = initializer_cls


def get_initializer(backend_type: str, **kwargs: Any) -> BackendInitializer:
    """
    Create the initializer for a backend type.

    Args:
        backend_type: Backend type, e.g. "azurerm"
        **kwargs: Passed to the initializer's constructor

    Raises:
        UnsupportedBackendError: If no initializer is registered for the type
    """
    initializer_cls = _INITIALIZERS.get(backend_type)
    if initializer_cls is None:
        supported = ", ".join(sorted(_INITIALIZERS))
        raise UnsupportedBackendError(
            f"No initializer for backend '{backend_type}' (supported: {supported})"
        )
    return initializer_cls(**kwargs)


__all__ = [
    "AzureRMInitializer",
    "BackendInitializer",
    "InitializationResult",
    "InitializationState",
    "get_initializer",
    "register_initializer",
]
