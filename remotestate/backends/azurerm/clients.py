"""
Azure management clients used to provision the azurerm backend.

The async credential and the management clients share the aiohttp session of
the event loop that opened them, so they are all opened per call and closed
when the provisioning call that needed them returns.
"""

from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable

from azure.identity.aio import DefaultAzureCredential
from azure.mgmt.resource.resources.aio import ResourceManagementClient
from azure.mgmt.storage.aio import StorageManagementClient


@dataclass
class AzureClients:
    """Management-plane clients for one subscription."""

    subscription_id: str
    resources: Any  # ResourceManagementClient or a compatible stand-in
    storage: Any  # StorageManagementClient or a compatible stand-in


@asynccontextmanager
async def open_azure_clients(subscription_id: str, credential: Any = None) -> AsyncIterator[AzureClients]:
    """
    Open resource and storage management clients for a subscription.

    Args:
        subscription_id: Azure subscription ID
        credential: Async token credential owned by the caller; when omitted a
            DefaultAzureCredential is opened for this call and closed with it

    Yields:
        AzureClients bound to ``subscription_id``
    """
    async with AsyncExitStack() as stack:
        if credential is None:
            credential = await stack.enter_async_context(DefaultAzureCredential())
        resources = await stack.enter_async_context(ResourceManagementClient(credential, subscription_id))
        storage = await stack.enter_async_context(StorageManagementClient(credential, subscription_id))
        yield AzureClients(subscription_id=subscription_id, resources=resources, storage=storage)


# Signature of open_azure_clients, so initializers can be handed another factory
ClientsFactory = Callable[[str], Any]
