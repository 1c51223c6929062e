"""
azurerm backend: Azure Storage blob container holding remote state.
"""

from .config import (
    TOOL_ONLY_KEYS,
    ExtendedRemoteStateConfig,
    RemoteStateConfig,
    filter_tool_only_keys,
    parse_config,
    parse_extended_config,
)
from .differ import configs_equal
from .initializer import AzureRMInitializer

__all__ = [
    "AzureRMInitializer",
    "ExtendedRemoteStateConfig",
    "RemoteStateConfig",
    "TOOL_ONLY_KEYS",
    "configs_equal",
    "filter_tool_only_keys",
    "parse_config",
    "parse_extended_config",
]
