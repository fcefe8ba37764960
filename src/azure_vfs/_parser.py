"""NameParser — turns blob-store URIs into PathName instances."""

from __future__ import annotations

from azure_vfs._errors import MalformedUriError
from azure_vfs._name import DEFAULT_HOST_SUFFIX, DEFAULT_SCHEME, SEPARATOR, PathName, normalize_path
from azure_vfs._types import FileType


class NameParser:
    """Parses ``scheme://account.host/container/path`` URIs.

    The account is the part of the host before the first dot. A URI ending
    with a slash, and the container root, name a folder; every other URI
    names a file until the store says otherwise.

    :param scheme: The only scheme this parser accepts.
    :param host_suffix: DNS suffix used when rendering parsed names.
    """

    _default: NameParser | None = None

    def __init__(self, scheme: str = DEFAULT_SCHEME, host_suffix: str = DEFAULT_HOST_SUFFIX) -> None:
        self._scheme = scheme
        self._host_suffix = host_suffix

    @classmethod
    def instance(cls) -> NameParser:
        """Shared parser for the default scheme."""
        if cls._default is None:
            cls._default = cls()
        return cls._default

    @property
    def scheme(self) -> str:
        return self._scheme

    def parse_uri(self, uri: str) -> PathName:
        """Parse ``uri`` into a name.

        :raises MalformedUriError: If the scheme is wrong or no container is given.
        """
        stripped = uri.split("#", 1)[0].split("?", 1)[0]
        scheme, sep, rest = stripped.partition("://")
        if not sep or not scheme:
            raise MalformedUriError("URI has no scheme", path=uri)
        if scheme.lower() != self._scheme:
            raise MalformedUriError(f"Expected scheme '{self._scheme}', got '{scheme}'", path=uri)

        segments = rest.split(SEPARATOR)
        if len(segments) < 2 or not segments[0] or not segments[1]:
            raise MalformedUriError("URI must name an account host and a container", path=uri)

        host = segments[0]
        account = host.split(".", 1)[0]
        container = segments[1]
        path = normalize_path(SEPARATOR + SEPARATOR.join(segments[2:]))

        if stripped.endswith(SEPARATOR) or path == SEPARATOR:
            file_type = FileType.FOLDER
        else:
            file_type = FileType.FILE

        return PathName(self._scheme, account, container, path, file_type, host_suffix=self._host_suffix)
