"""
Initializer for the azurerm backend.

Decision: NeedsInitialization is true when the recorded backend differs from
the requested one, or when the resource group, storage account or blob
container is missing.
Provisioning: under the storage account's lock, ensure resource group →
storage account → blob container, aborting on the first failure.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from ...locking import AccountLockRegistry, get_lock_registry
from ...models import BackendSnapshot, RemoteState
from ...settings import get_settings
from ..base import BackendInitializer, InitializationResult, InitializationState
from .clients import AzureClients, ClientsFactory, open_azure_clients
from .config import ExtendedRemoteStateConfig, filter_tool_only_keys, parse_extended_config
from .differ import BACKEND_TYPE, configs_equal
from .provisioner import (
    blob_container_exists,
    ensure_blob_container,
    ensure_resource_group,
    ensure_storage_account,
    resource_group_exists,
    storage_account_exists,
)

logger = logging.getLogger(__name__)


class AzureRMInitializer(BackendInitializer):
    """Provisions the resource group, storage account and container behind azurerm state."""

    backend_type = BACKEND_TYPE

    def __init__(
        self,
        clients_factory: Optional[ClientsFactory] = None,
        lock_registry: Optional[AccountLockRegistry] = None,
        poll_timeout: Optional[float] = None,
    ):
        """
        Initialize AzureRMInitializer.

        Args:
            clients_factory: Async context manager factory taking a subscription ID and
                yielding AzureClients (defaults to real Azure management clients)
            lock_registry: Account lock table (defaults to the process-wide registry)
            poll_timeout: Seconds to wait for storage account creation (overrides settings)
        """
        self.clients_factory = clients_factory or open_azure_clients
        self._lock_registry = lock_registry
        self.poll_timeout = poll_timeout if poll_timeout is not None else get_settings().poll_timeout_seconds

    @property
    def lock_registry(self) -> AccountLockRegistry:
        if self._lock_registry is not None:
            return self._lock_registry
        return get_lock_registry()

    async def decide(
        self, remote_state: RemoteState, existing: Optional[BackendSnapshot]
    ) -> InitializationState:
        """
        Decide whether the backend must be (re)initialized.

        Args:
            remote_state: Requested remote state
            existing: Backend snapshot recorded by the infrastructure tool, if any

        Returns:
            NEEDED if the config drifted or any backend resource is missing,
            NOT_NEEDED otherwise

        Raises:
            DecodeError: If the config is malformed
            ConfigurationError: If a required setting is missing
            AzureError: If an existence probe fails
        """
        if not configs_equal(remote_state.config, existing):
            logger.debug("Backend config drifted, initialization needed")
            return InitializationState.NEEDED

        config = parse_extended_config(remote_state.config)
        target = config.remote_state
        target.check_required()

        async with self.clients_factory(target.subscription_id) as clients:
            missing = await self._find_missing_resource(clients, config)

        if missing:
            logger.debug(f"{missing} does not exist, initialization needed")
            return InitializationState.NEEDED

        logger.debug("azurerm backend is up to date")
        return InitializationState.NOT_NEEDED

    async def _find_missing_resource(
        self, clients: AzureClients, config: ExtendedRemoteStateConfig
    ) -> Optional[str]:
        target = config.remote_state

        if not await resource_group_exists(clients, target.resource_group_name):
            return f"Resource group '{target.resource_group_name}'"

        if not config.skip_storage_account_creation and not await storage_account_exists(
            clients, target.resource_group_name, target.storage_account_name
        ):
            return f"Storage account '{target.storage_account_name}'"

        if not config.skip_container_creation and not await blob_container_exists(
            clients, target.resource_group_name, target.storage_account_name, target.container_name
        ):
            return f"Blob container '{target.container_name}'"

        return None

    async def initialize(self, remote_state: RemoteState) -> InitializationResult:
        """
        Create the backend resources that do not exist yet.

        Only one initialization per storage account runs at a time in this
        process. Resources created before a failure are left in place; calling
        again resumes where the previous attempt stopped.

        Args:
            remote_state: Requested remote state

        Returns:
            InitializationResult listing what this call created

        Raises:
            DecodeError: If the config is malformed
            ConfigurationError: If a required setting or location is missing
            NotFoundError: If the resource group is absent and its creation is skipped
            ProvisioningTimeoutError: If storage account creation exceeds the poll timeout
            AzureError: If any management API call fails
        """
        config = parse_extended_config(remote_state.config)
        target = config.remote_state
        target.check_required()

        result = InitializationResult(backend=self.backend_type, state=InitializationState.PROVISIONING)

        try:
            async with self.lock_registry.hold(target.storage_account_name):
                async with self.clients_factory(target.subscription_id) as clients:
                    await self._provision(clients, config, result)
        except Exception as e:
            result.state = InitializationState.FAILED
            logger.error(f"Initialization of azurerm backend '{target.storage_account_name}' failed: {e}")
            raise

        result.state = InitializationState.DONE
        logger.info(f"azurerm backend ready: {target.storage_account_name}/{target.container_name}")
        return result

    async def _provision(
        self, clients: AzureClients, config: ExtendedRemoteStateConfig, result: InitializationResult
    ) -> None:
        target = config.remote_state

        resource_group = await ensure_resource_group(
            clients,
            target.resource_group_name,
            config.resource_group_location,
            create_if_missing=not config.skip_resource_group_creation,
        )

        location = config.storage_account_location or resource_group.location
        if await ensure_storage_account(
            clients,
            target.resource_group_name,
            target.storage_account_name,
            location,
            skip=config.skip_storage_account_creation,
            poll_timeout=self.poll_timeout,
        ):
            result.created.append(f"storage_account:{target.storage_account_name}")

        if await ensure_blob_container(
            clients,
            target.resource_group_name,
            target.storage_account_name,
            target.container_name,
            skip=config.skip_container_creation,
        ):
            result.created.append(f"container:{target.container_name}")

    def get_backend_init_args(self, config: Mapping[str, Any]) -> Dict[str, Any]:
        """Return ``config`` without the tool-only keys."""
        return filter_tool_only_keys(config)
