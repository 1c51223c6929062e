"""
Idempotent provisioning of the azurerm backend resources.

Each ``ensure_*`` coroutine checks before it creates, so the whole sequence
can be re-run after a partial failure. Order matters: resource group, then
storage account, then blob container, each step needing the previous one.

Known limitation: storage account names are global. A name reported as
unavailable is treated as "already exists", which cannot tell an account in
this resource group from one owned by somebody else.
"""

import asyncio
import logging
from typing import Any, Optional

from azure.core.exceptions import HttpResponseError, ResourceNotFoundError
from azure.mgmt.resource.resources.models import ResourceGroup
from azure.mgmt.storage.models import (
    BlobContainer,
    Kind,
    PublicAccess,
    Sku,
    SkuName,
    StorageAccountCheckNameAvailabilityParameters,
    StorageAccountCreateParameters,
)

from ...errors import ConfigurationError, NotFoundError, ProvisioningTimeoutError
from .clients import AzureClients

logger = logging.getLogger(__name__)


def _is_not_found(error: HttpResponseError) -> bool:
    return isinstance(error, ResourceNotFoundError) or error.status_code == 404


async def _wait_for_completion(poller: Any, timeout: Optional[float], operation_name: str) -> Any:
    """
    Wait for a long-running operation to finish.

    Args:
        poller: Async LRO poller returned by a ``begin_*`` call
        timeout: Seconds to wait, or None to wait until done
        operation_name: Human-readable name for logging

    Raises:
        ProvisioningTimeoutError: If the operation exceeds ``timeout``
    """
    try:
        return await asyncio.wait_for(poller.result(), timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.error(f"{operation_name} did not complete within {timeout}s")
        raise ProvisioningTimeoutError(
            f"{operation_name} did not complete within {timeout}s"
        ) from e


# =============================================================================
# Existence probes
# =============================================================================

async def resource_group_exists(clients: AzureClients, name: str) -> bool:
    """Check whether resource group ``name`` exists."""
    return bool(await clients.resources.resource_groups.check_existence(name))


async def storage_account_exists(clients: AzureClients, resource_group_name: str, name: str) -> bool:
    """Check whether storage account ``name`` exists in the resource group."""
    try:
        await clients.storage.storage_accounts.get_properties(resource_group_name, name)
    except HttpResponseError as e:
        if _is_not_found(e):
            return False
        raise
    return True


async def blob_container_exists(
    clients: AzureClients, resource_group_name: str, account_name: str, name: str
) -> bool:
    """Check whether blob container ``name`` exists in the storage account."""
    try:
        await clients.storage.blob_containers.get(resource_group_name, account_name, name)
    except HttpResponseError as e:
        if _is_not_found(e):
            return False
        raise
    return True


# =============================================================================
# Ensure operations
# =============================================================================

async def ensure_resource_group(
    clients: AzureClients, name: str, location: str, create_if_missing: bool = True
) -> Any:
    """
    Make sure resource group ``name`` exists and return it.

    With ``create_if_missing`` the group is upserted, which succeeds whether or
    not it already exists. Without it the group is only fetched.

    Args:
        clients: Management clients for the target subscription
        name: Resource group name
        location: Location used if the group is created
        create_if_missing: Upsert the group instead of only fetching it

    Returns:
        The resource group, including its resolved location

    Raises:
        ConfigurationError: If creation is requested without a location
        NotFoundError: If the group is absent and creation is disabled
    """
    if not create_if_missing:
        try:
            return await clients.resources.resource_groups.get(name)
        except HttpResponseError as e:
            if _is_not_found(e):
                raise NotFoundError("Resource group", name) from e
            raise

    if not location:
        raise ConfigurationError(
            f"resource_group_location is required to create resource group '{name}'"
        )

    logger.info(f"Ensuring resource group '{name}' in {location}")
    return await clients.resources.resource_groups.create_or_update(
        name, ResourceGroup(location=location)
    )


async def ensure_storage_account(
    clients: AzureClients,
    resource_group_name: str,
    name: str,
    location: str,
    skip: bool = False,
    poll_timeout: Optional[float] = None,
) -> bool:
    """
    Create storage account ``name`` if its name is still available.

    Args:
        clients: Management clients for the target subscription
        resource_group_name: Resource group that will hold the account
        name: Storage account name
        location: Location for a new account
        skip: Do nothing
        poll_timeout: Seconds to wait for the creation to finish

    Returns:
        True if the account was created by this call
    """
    if skip:
        return False

    availability = await clients.storage.storage_accounts.check_name_availability(
        StorageAccountCheckNameAvailabilityParameters(name=name)
    )
    if not availability.name_available:
        logger.debug(f"Storage account name '{name}' is taken ({availability.reason}), assuming it exists")
        return False

    if not location:
        raise ConfigurationError(f"No location available for storage account '{name}'")

    logger.info(f"Creating storage account '{name}' in {location}")
    poller = await clients.storage.storage_accounts.begin_create(
        resource_group_name,
        name,
        StorageAccountCreateParameters(
            sku=Sku(name=SkuName.STANDARD_LRS),
            kind=Kind.STORAGE_V2,
            location=location,
        ),
    )
    await _wait_for_completion(poller, poll_timeout, f"Creation of storage account '{name}'")
    logger.info(f"✓ Storage account '{name}' created")
    return True


async def ensure_blob_container(
    clients: AzureClients,
    resource_group_name: str,
    account_name: str,
    name: str,
    skip: bool = False,
) -> bool:
    """
    Create private blob container ``name`` if it does not exist.

    Returns:
        True if the container was created by this call
    """
    if skip:
        return False

    if await blob_container_exists(clients, resource_group_name, account_name, name):
        return False

    logger.info(f"Creating blob container '{name}' in storage account '{account_name}'")
    await clients.storage.blob_containers.create(
        resource_group_name,
        account_name,
        name,
        BlobContainer(public_access=PublicAccess.NONE),
    )
    logger.info(f"✓ Blob container '{name}' created")
    return True
