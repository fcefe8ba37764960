"""AzureFileSystem — one container of one storage account."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from azure_vfs._capabilities import Capability, CapabilitySet
from azure_vfs._config import FileSystemOptions
from azure_vfs._errors import MalformedUriError
from azure_vfs._name import PathName
from azure_vfs._object import AzureFileObject
from azure_vfs._types import NameScope

if TYPE_CHECKING:
    from types import TracebackType

    from azure_vfs._blob import ContainerHandle
    from azure_vfs._types import FileType

log = logging.getLogger(__name__)

_CAPABILITIES = CapabilitySet(
    frozenset(
        {
            Capability.READ_CONTENT,
            Capability.WRITE_CONTENT,
            Capability.RANDOM_ACCESS_READ,
            Capability.LIST_CHILDREN,
            Capability.CREATE_FOLDER,
            Capability.DELETE,
            Capability.GET_LAST_MODIFIED,
            Capability.SET_LAST_MODIFIED_FILE,
        }
    )
)


class AzureFileSystem:
    """Creates file objects sharing one container connection.

    :param root_name: Any name in the container; its root becomes the filesystem root.
    :param container: Handle of the container.
    :param options: Tuning options; defaults apply when omitted.
    """

    def __init__(
        self,
        root_name: PathName,
        container: ContainerHandle,
        options: FileSystemOptions | None = None,
    ) -> None:
        self._root_name = root_name.root()
        self._container = container
        self._options = options or FileSystemOptions()
        if not self._options.signed_url_https_only:
            log.warning("Signed URLs for %s will also be valid over plain HTTP", self._root_name.root_uri)

    def __repr__(self) -> str:
        return f"AzureFileSystem({self._root_name.root_uri!r})"

    @property
    def root_name(self) -> PathName:
        return self._root_name

    @property
    def container(self) -> ContainerHandle:
        return self._container

    @property
    def options(self) -> FileSystemOptions:
        return self._options

    @property
    def account_name(self) -> str:
        """Storage account the container client is connected to."""
        return self._container.account_name

    @property
    def capabilities(self) -> CapabilitySet:
        return _CAPABILITIES

    def create_file_object(self, name: PathName, *, known_type: FileType | None = None) -> AzureFileObject:
        """Create a file object for ``name``. No request is made."""
        return AzureFileObject(name, self, known_type=known_type)

    def resolve_file(self, path: str | PathName, scope: NameScope = NameScope.FILE_SYSTEM) -> AzureFileObject:
        """Resolve a path (relative to the root) or a name of this container.

        :raises MalformedUriError: If ``path`` names another container or violates ``scope``.
        """
        if isinstance(path, PathName):
            if path != self._root_name and not self._root_name.is_descendant(path):
                raise MalformedUriError(f"'{path.uri}' is not in {self._root_name.root_uri}", path=path.uri)
            return self.create_file_object(path)
        return self.create_file_object(self._root_name.resolve(path, scope))

    def get_root(self) -> AzureFileObject:
        return self.create_file_object(self._root_name)

    def close(self) -> None:
        log.debug("Closing %r", self)
        self._container.close()

    def __enter__(self) -> AzureFileSystem:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
