"""
Remotestate - provisioning and validation of remote state backends.

Decides whether the storage behind an infrastructure tool's remote state must
be (re)created, and creates it idempotently when it must:

- needs_initialization: compare the recorded backend with the requested one and
  probe the backend's resources
- initialize: create the resources, one provisioning run per storage account at a time
- get_backend_init_args: strip settings the tool's native backend does not understand
"""

from .backends import BackendInitializer, get_initializer, register_initializer
from .backends.azurerm import AzureRMInitializer
from .models import BackendSnapshot, RemoteState, load_backend_snapshot, load_remote_state
from .settings import RemoteStateSettings, get_settings, reload_settings

__version__ = "0.1.0"
__all__ = [
    "AzureRMInitializer",
    "BackendInitializer",
    "BackendSnapshot",
    "RemoteState",
    "RemoteStateSettings",
    "get_initializer",
    "get_settings",
    "load_backend_snapshot",
    "load_remote_state",
    "register_initializer",
    "reload_settings",
]
