"""
Remotestate errors.

Failures from the Azure management API are not wrapped: they surface as the
SDK's ``azure.core.exceptions.AzureError`` family so callers own retry policy.
"""


class RemoteStateError(Exception):
    """Base exception for all remotestate errors."""
    pass


class DecodeError(RemoteStateError):
    """Backend configuration could not be decoded into its typed model."""
    pass


class ConfigurationError(RemoteStateError):
    """Backend configuration decoded but is not usable as given."""
    pass


class NotFoundError(RemoteStateError):
    """A resource whose creation was skipped does not exist."""

    def __init__(self, resource_type: str, name: str):
        self.resource_type = resource_type
        self.name = name
        super().__init__(f"{resource_type} '{name}' does not exist and its creation is disabled")


class ProvisioningTimeoutError(RemoteStateError, TimeoutError):
    """Waiting for an asynchronous creation exceeded the configured timeout."""
    pass


class UnsupportedBackendError(RemoteStateError):
    """No initializer is registered for the requested backend type."""
    pass
