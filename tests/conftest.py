"""
Pytest configuration and fixtures for remotestate tests.
"""

import asyncio
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from types import SimpleNamespace

import pytest
from azure.core.exceptions import ResourceNotFoundError

from remotestate.backends.azurerm import AzureRMInitializer
from remotestate.backends.azurerm.clients import AzureClients
from remotestate.locking import AccountLockRegistry


class FakePoller:
    """Stand-in for an async LRO poller; the work happens in result()."""

    def __init__(self, azure: "FakeAzure", complete):
        self._azure = azure
        self._complete = complete

    async def result(self):
        if self._azure.hang_polls:
            await asyncio.sleep(3600)
        await self._azure._call("storage_accounts.poll")
        return self._complete()


class _ResourceGroups:
    def __init__(self, azure: "FakeAzure"):
        self._azure = azure

    async def check_existence(self, name):
        await self._azure._call("resource_groups.check_existence", name)
        return name in self._azure.resource_groups

    async def get(self, name):
        await self._azure._call("resource_groups.get", name)
        if name not in self._azure.resource_groups:
            raise ResourceNotFoundError(f"Resource group '{name}' could not be found.")
        return SimpleNamespace(name=name, location=self._azure.resource_groups[name])

    async def create_or_update(self, name, parameters):
        await self._azure._call("resource_groups.create_or_update", name)
        location = self._azure.resource_groups.setdefault(name, parameters.location)
        return SimpleNamespace(name=name, location=location)


class _StorageAccounts:
    def __init__(self, azure: "FakeAzure"):
        self._azure = azure

    async def check_name_availability(self, parameters):
        await self._azure._call("storage_accounts.check_name_availability", parameters.name)
        taken = parameters.name in self._azure.storage_accounts or parameters.name in self._azure.taken_names
        return SimpleNamespace(
            name_available=not taken,
            reason="AlreadyExists" if taken else None,
        )

    async def begin_create(self, resource_group_name, name, parameters):
        await self._azure._call("storage_accounts.begin_create", resource_group_name, name)

        def complete():
            account = {
                "resource_group": resource_group_name,
                "location": parameters.location,
                "kind": parameters.kind,
                "sku": parameters.sku.name,
            }
            self._azure.storage_accounts[name] = account
            return SimpleNamespace(name=name, **account)

        return FakePoller(self._azure, complete)

    async def get_properties(self, resource_group_name, name):
        await self._azure._call("storage_accounts.get_properties", resource_group_name, name)
        account = self._azure.storage_accounts.get(name)
        if account is None or account["resource_group"] != resource_group_name:
            raise ResourceNotFoundError(f"Storage account '{name}' not found.")
        return SimpleNamespace(name=name, **account)


class _BlobContainers:
    def __init__(self, azure: "FakeAzure"):
        self._azure = azure

    async def get(self, resource_group_name, account_name, name):
        await self._azure._call("blob_containers.get", resource_group_name, account_name, name)
        key = (resource_group_name, account_name, name)
        if key not in self._azure.containers:
            raise ResourceNotFoundError(f"Container '{name}' not found.")
        return SimpleNamespace(name=name, **self._azure.containers[key])

    async def create(self, resource_group_name, account_name, name, blob_container):
        await self._azure._call("blob_containers.create", resource_group_name, account_name, name)
        key = (resource_group_name, account_name, name)
        self._azure.containers[key] = {"public_access": blob_container.public_access}
        return SimpleNamespace(name=name, **self._azure.containers[key])


class FakeAzure:
    """
    In-memory Azure management plane.

    Every call is recorded in ``calls`` as a tuple of operation name and
    arguments. ``errors`` maps an operation name to an exception to raise,
    and ``delay`` makes every call yield to the event loop.
    """

    def __init__(self):
        self.resource_groups = {}
        self.storage_accounts = {}
        self.containers = {}
        self.taken_names = set()
        self.calls = []
        self.errors = {}
        self.delay = 0.0
        self.hang_polls = False
        self.subscriptions = []

    async def _call(self, operation, *args):
        self.calls.append((operation, *args))
        if self.delay:
            await asyncio.sleep(self.delay)
        error = self.errors.get(operation)
        if error is not None:
            raise error

    def operations(self):
        return [call[0] for call in self.calls]

    def count(self, operation):
        return self.operations().count(operation)

    def build_clients(self, subscription_id="s"):
        return AzureClients(
            subscription_id=subscription_id,
            resources=SimpleNamespace(resource_groups=_ResourceGroups(self)),
            storage=SimpleNamespace(
                storage_accounts=_StorageAccounts(self),
                blob_containers=_BlobContainers(self),
            ),
        )

    @asynccontextmanager
    async def clients(self, subscription_id):
        self.subscriptions.append(subscription_id)
        yield self.build_clients(subscription_id)


@pytest.fixture
def temp_dir():
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def fake_azure():
    """Empty in-memory Azure management plane."""
    return FakeAzure()


@pytest.fixture
def azure_clients(fake_azure):
    """AzureClients bound to the fake management plane."""
    return fake_azure.build_clients("s")


@pytest.fixture
def lock_registry():
    """Lock registry private to one test."""
    return AccountLockRegistry()


@pytest.fixture
def initializer(fake_azure, lock_registry):
    """AzureRMInitializer wired to the fake management plane."""
    return AzureRMInitializer(clients_factory=fake_azure.clients, lock_registry=lock_registry)


@pytest.fixture
def backend_config():
    """Complete azurerm backend config with tool-only settings."""
    return {
        "subscription_id": "s",
        "resource_group_name": "rg1",
        "storage_account_name": "sa1",
        "storage_account_location": "",
        "resource_group_location": "North Europe",
        "container_name": "c1",
        "key": "k",
    }
