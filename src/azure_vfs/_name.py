"""PathName — immutable name of an object inside one blob container."""

from __future__ import annotations

from typing import Final

from azure_vfs._errors import MalformedUriError
from azure_vfs._types import FileType, NameScope

DEFAULT_SCHEME = "azbs"
DEFAULT_HOST_SUFFIX = "blob.core.windows.net"
SEPARATOR = "/"
ROOT_PATH = "/"


def normalize_path(raw: str) -> str:
    """Normalize an absolute path: collapse ``.``, ``..`` and repeated slashes.

    The result always starts with ``/`` and never ends with one, except for
    the root path itself.

    :raises MalformedUriError: If ``..`` climbs above the root.
    """
    if "\0" in raw:
        raise MalformedUriError("Path contains null byte", path=raw)
    parts: list[str] = []
    for segment in raw.replace("\\", SEPARATOR).split(SEPARATOR):
        if segment in ("", "."):
            continue
        if segment == "..":
            if not parts:
                raise MalformedUriError("Path climbs above the container root", path=raw)
            parts.pop()
            continue
        parts.append(segment)
    return ROOT_PATH + SEPARATOR.join(parts)


class PathName:
    """The name of a file or folder within one container of one storage account.

    A name is immutable. Deriving a name with a different type or path
    always returns a new instance.

    :param scheme: URI scheme of the provider.
    :param account: Storage account name.
    :param container: Container name.
    :param path: Absolute path inside the container; normalized on construction.
    :param file_type: Declared type; the root is always ``FOLDER``.
    :param host_suffix: DNS suffix appended to the account in URIs.
    """

    __slots__ = ("_scheme", "_account", "_container", "_path", "_type", "_host_suffix")
    _scheme: Final[str]  # type: ignore[misc]
    _account: Final[str]  # type: ignore[misc]
    _container: Final[str]  # type: ignore[misc]
    _path: Final[str]  # type: ignore[misc]
    _type: Final[FileType]  # type: ignore[misc]
    _host_suffix: Final[str]  # type: ignore[misc]

    def __init__(
        self,
        scheme: str,
        account: str,
        container: str,
        path: str = ROOT_PATH,
        file_type: FileType = FileType.IMAGINARY,
        *,
        host_suffix: str = DEFAULT_HOST_SUFFIX,
    ) -> None:
        if not container:
            raise MalformedUriError("Container name must not be empty", path=path)
        normalized = normalize_path(path)
        if normalized == ROOT_PATH:
            file_type = FileType.FOLDER
        object.__setattr__(self, "_scheme", scheme)
        object.__setattr__(self, "_account", account)
        object.__setattr__(self, "_container", container)
        object.__setattr__(self, "_path", normalized)
        object.__setattr__(self, "_type", file_type)
        object.__setattr__(self, "_host_suffix", host_suffix)

    # region: components

    @property
    def scheme(self) -> str:
        return self._scheme

    @property
    def account(self) -> str:
        return self._account

    @property
    def container(self) -> str:
        return self._container

    @property
    def path(self) -> str:
        """Absolute path, ``/`` for the container root."""
        return self._path

    @property
    def type(self) -> FileType:
        """Type declared when the name was created."""
        return self._type

    @property
    def key(self) -> str:
        """Blob key: the path without its leading slash (empty for the root)."""
        return self._path[1:]

    @property
    def base_name(self) -> str:
        """Final component of the path, empty for the root."""
        return self._path.rsplit(SEPARATOR, 1)[-1]

    @property
    def depth(self) -> int:
        """Number of path segments below the root."""
        if self.is_root:
            return 0
        return self._path.count(SEPARATOR)

    @property
    def is_root(self) -> bool:
        return self._path == ROOT_PATH

    @property
    def parent(self) -> PathName | None:
        """Parent folder name, or ``None`` for the root."""
        if self.is_root:
            return None
        parent_path = self._path.rsplit(SEPARATOR, 1)[0] or ROOT_PATH
        return self.create_name(parent_path, FileType.FOLDER)

    @property
    def root_uri(self) -> str:
        """URI of the container root, without a trailing separator."""
        host = f"{self._account}.{self._host_suffix}" if self._host_suffix else self._account
        return f"{self._scheme}://{host}/{self._container}"

    @property
    def uri(self) -> str:
        return self.root_uri + self._path

    # endregion

    # region: derivation

    def create_name(self, absolute_path: str, file_type: FileType) -> PathName:
        """Create a name in the same container."""
        return PathName(
            self._scheme,
            self._account,
            self._container,
            absolute_path,
            file_type,
            host_suffix=self._host_suffix,
        )

    def with_type(self, file_type: FileType) -> PathName:
        """Return a copy of this name declaring ``file_type``."""
        if file_type is self._type:
            return self
        return self.create_name(self._path, file_type)

    def root(self) -> PathName:
        """Name of the container root."""
        return self.create_name(ROOT_PATH, FileType.FOLDER)

    def resolve(self, relative: str, scope: NameScope = NameScope.FILE_SYSTEM) -> PathName:
        """Resolve ``relative`` against this name.

        A trailing slash declares the result a folder; any other result is
        ``IMAGINARY`` until checked against the store. A leading slash makes
        ``relative`` absolute within the container.

        :raises MalformedUriError: If the result violates ``scope``.
        """
        if relative.startswith(SEPARATOR):
            joined = relative
        else:
            joined = f"{self._path}{SEPARATOR}{relative}"
        file_type = FileType.FOLDER if relative.endswith(SEPARATOR) else FileType.IMAGINARY
        resolved = self.create_name(joined, file_type)
        if not self._in_scope(resolved, scope):
            raise MalformedUriError(
                f"'{relative}' is not a {scope.value.replace('_', ' ')} name of '{self._path}'",
                path=resolved.uri,
            )
        return resolved

    def _in_scope(self, other: PathName, scope: NameScope) -> bool:
        if scope is NameScope.FILE_SYSTEM:
            return True
        if scope is NameScope.CHILD:
            parent = other.parent
            return parent is not None and parent == self
        if scope is NameScope.DESCENDENT_OR_SELF and other == self:
            return True
        return self.is_descendant(other)

    def is_descendant(self, other: PathName) -> bool:
        """Whether ``other`` lies strictly below this name in the same container."""
        if not self._same_container(other) or other._path == self._path:
            return False
        if self.is_root:
            return True
        return other._path.startswith(self._path + SEPARATOR)

    def relative_name(self, other: PathName) -> str:
        """Path of ``other`` relative to this name (``.`` for itself).

        :raises MalformedUriError: If ``other`` is in another container.
        """
        if not self._same_container(other):
            raise MalformedUriError(f"'{other.uri}' is not in the container of '{self.uri}'", path=other.uri)
        own = [p for p in self._path.split(SEPARATOR) if p]
        theirs = [p for p in other._path.split(SEPARATOR) if p]
        common = 0
        while common < min(len(own), len(theirs)) and own[common] == theirs[common]:
            common += 1
        parts = [".."] * (len(own) - common) + theirs[common:]
        return SEPARATOR.join(parts) or "."

    def _same_container(self, other: PathName) -> bool:
        return (self._scheme, self._account, self._container) == (other._scheme, other._account, other._container)

    # endregion

    def __str__(self) -> str:
        return self.uri

    def __repr__(self) -> str:
        return f"PathName({self.uri!r}, type={self._type.name})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PathName):
            return self._same_container(other) and self._path == other._path
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self._scheme, self._account, self._container, self._path))

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"PathName is immutable: cannot set '{name}'")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"PathName is immutable: cannot delete '{name}'")
