"""Shared test fixtures and marker registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from azure_vfs._config import FileSystemOptions, ProviderConfig
from azure_vfs._manager import FileSystemManager
from tests.fake_azure import ACCOUNT, CONTAINER, OTHER_ACCOUNT, ROOT_URI, FakeAzure

if TYPE_CHECKING:
    from collections.abc import Iterator

    from azure_vfs._filesystem import AzureFileSystem


def pytest_configure(config: object) -> None:
    """Register custom markers."""
    if isinstance(config, pytest.Config):
        config.addinivalue_line("markers", "integration: requires external services")


@pytest.fixture()
def azure() -> FakeAzure:
    """An empty in-memory store with one container in each of two accounts."""
    world = FakeAzure()
    world.add_container(ACCOUNT, CONTAINER)
    world.add_container(OTHER_ACCOUNT, CONTAINER)
    return world


@pytest.fixture()
def options() -> FileSystemOptions:
    """Small sizes so block and threshold behaviour shows with tiny payloads."""
    return FileSystemOptions(
        default_block_size_mb=1,
        server_side_copy_threshold_mb=1,
        read_buffer_size_mb=1,
        copy_poll_interval_seconds=0.01,
    )


@pytest.fixture()
def manager(azure: FakeAzure, options: FileSystemOptions) -> Iterator[FileSystemManager]:
    mgr = FileSystemManager(ProviderConfig(options=options), container_factory=azure.container_client)
    yield mgr
    mgr.close()


@pytest.fixture()
def fs(manager: FileSystemManager) -> AzureFileSystem:
    return manager.get_filesystem(manager.parser.parse_uri(ROOT_URI + "/"))
