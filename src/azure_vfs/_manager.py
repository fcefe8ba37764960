"""FileSystemManager — URI resolution and filesystem lifecycle."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from azure.storage.blob import ContainerClient

from azure_vfs._blob import ContainerHandle
from azure_vfs._config import ProviderConfig
from azure_vfs._filesystem import AzureFileSystem
from azure_vfs._parser import NameParser

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from azure_vfs._name import PathName
    from azure_vfs._object import AzureFileObject

log = logging.getLogger(__name__)


class FileSystemManager:
    """Resolves URIs to file objects, creating one filesystem per container.

    :param config: Optional configuration. Validates immediately.
    :param container_factory: Builds the container client for
        ``(account, container)`` instead of the configured credentials.
    :raises ValueError: If config is invalid.
    """

    def __init__(
        self,
        config: ProviderConfig | None = None,
        *,
        container_factory: Callable[[str, str], ContainerClient] | None = None,
    ) -> None:
        self._config = config or ProviderConfig()
        self._config.validate()
        self._parser = NameParser(self._config.scheme)
        self._container_factory = container_factory
        self._filesystems: dict[tuple[str, str], AzureFileSystem] = {}

    def __repr__(self) -> str:
        open_fs = sorted(f"{account}/{container}" for account, container in self._filesystems)
        return f"FileSystemManager(scheme={self._config.scheme!r}, filesystems={open_fs!r})"

    @property
    def config(self) -> ProviderConfig:
        return self._config

    @property
    def parser(self) -> NameParser:
        return self._parser

    def resolve_file(self, uri: str) -> AzureFileObject:
        """Return the file object named by ``uri``.

        :raises MalformedUriError: If ``uri`` cannot be parsed.
        """
        name = self._parser.parse_uri(uri)
        return self.get_filesystem(name).create_file_object(name)

    def get_filesystem(self, name: PathName) -> AzureFileSystem:
        """Return the filesystem for the container of ``name``, connecting on first use."""
        key = (name.account, name.container)
        if key not in self._filesystems:
            client = self._connect(name.account, name.container)
            self._filesystems[key] = AzureFileSystem(name, ContainerHandle(client), self._config.options)
        return self._filesystems[key]

    def _connect(self, account: str, container: str) -> ContainerClient:
        if self._container_factory is not None:
            return self._container_factory(account, container)

        cfg = self._config.account(account)
        if cfg.connection_string:
            log.info("Connecting to container %s/%s with a connection string", account, container)
            return ContainerClient.from_connection_string(cfg.connection_string, container_name=container)

        account_url = cfg.account_url or f"https://{account}.{cfg.endpoint_suffix}"
        credential: Any
        if cfg.account_key:
            method = "account key"
            credential = {"account_name": account, "account_key": cfg.account_key}
        elif cfg.sas_token:
            method = "SAS token"
            credential = cfg.sas_token
        else:
            from azure.identity import DefaultAzureCredential

            method = "default Azure credential"
            credential = DefaultAzureCredential()
        log.info("Connecting to container %s at %s with %s", container, account_url, method)
        return ContainerClient(account_url=account_url, container_name=container, credential=credential)

    def close(self) -> None:
        """Close every filesystem created so far."""
        for fs in self._filesystems.values():
            fs.close()
        self._filesystems.clear()

    def __enter__(self) -> FileSystemManager:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
