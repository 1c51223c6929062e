"""
Typed configuration for the azurerm backend.

The untyped ``config`` mapping of a remote-state block is decoded by key name
into frozen pydantic models. Unknown keys are ignored so newer backend
attributes pass through untouched. The extended model adds the settings only
this package consumes; those are stripped before the configuration is handed
to the infrastructure tool.
"""

from typing import Any, Dict, Mapping

from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError

from ...errors import ConfigurationError, DecodeError

# Keys consumed here and never forwarded to the native backend block
TOOL_ONLY_KEYS = (
    "resource_group_location",
    "storage_account_location",
    "skip_resource_group_creation",
    "skip_storage_account_creation",
    "skip_container_creation",
)

REQUIRED_KEYS = (
    "subscription_id",
    "resource_group_name",
    "storage_account_name",
    "container_name",
    "key",
)


class RemoteStateConfig(BaseModel):
    """Backend attributes that identify where the state blob lives."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    tenant_id: StrictStr = ""
    subscription_id: StrictStr = ""
    resource_group_name: StrictStr = ""
    storage_account_name: StrictStr = ""
    container_name: StrictStr = ""
    key: StrictStr = ""

    def check_required(self) -> None:
        """Raise ConfigurationError naming every required attribute left empty."""
        missing = [name for name in REQUIRED_KEYS if not getattr(self, name)]
        if missing:
            raise ConfigurationError(
                f"Missing required azurerm backend settings: {', '.join(missing)}"
            )


class ExtendedRemoteStateConfig(BaseModel):
    """RemoteStateConfig plus creation toggles and locations."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    remote_state: RemoteStateConfig

    # Only used when the resource group is created; location cannot be updated
    resource_group_location: StrictStr = ""
    # Falls back to the resource group's location when empty
    storage_account_location: StrictStr = ""

    skip_resource_group_creation: bool = False
    skip_storage_account_creation: bool = False
    skip_container_creation: bool = False


def _present(config: Mapping[str, Any]) -> Dict[str, Any]:
    # A null value is the same as an unset key
    return {key: value for key, value in config.items() if value is not None}


def parse_config(config: Mapping[str, Any]) -> RemoteStateConfig:
    """
    Decode a backend configuration mapping into a RemoteStateConfig.

    Args:
        config: Untyped backend configuration

    Returns:
        RemoteStateConfig

    Raises:
        DecodeError: If a recognized key holds a value of the wrong type
    """
    try:
        return RemoteStateConfig.model_validate(_present(config))
    except ValidationError as e:
        raise DecodeError(f"Invalid azurerm backend config: {e}") from e


def parse_extended_config(config: Mapping[str, Any]) -> ExtendedRemoteStateConfig:
    """
    Decode a backend configuration mapping into an ExtendedRemoteStateConfig.

    Raises:
        DecodeError: If a recognized key holds a value of the wrong type
    """
    remote_state = parse_config(config)
    extended = {key: value for key, value in _present(config).items() if key in TOOL_ONLY_KEYS}
    extended["remote_state"] = remote_state

    try:
        return ExtendedRemoteStateConfig.model_validate(extended)
    except ValidationError as e:
        raise DecodeError(f"Invalid azurerm backend config: {e}") from e


def filter_tool_only_keys(config: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``config`` without the tool-only keys."""
    return {key: value for key, value in config.items() if key not in TOOL_ONLY_KEYS}
