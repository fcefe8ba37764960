"""Normalized error hierarchy for azure_vfs."""

from __future__ import annotations

from typing import Optional


class FileSystemError(Exception):
    """Base class for all azure_vfs errors.

    :param message: Human-readable error description.
    :param path: The path or URI involved in the error, if any.
    """

    def __init__(self, message: str = "", *, path: Optional[str] = None) -> None:
        self.path = path
        super().__init__(message)

    def _context(self) -> list[str]:
        if self.path is not None:
            return [f"path={self.path!r}"]
        return []

    def __str__(self) -> str:
        parts = [super().__str__(), *self._context()]
        return " | ".join(p for p in parts if p)

    def __repr__(self) -> str:
        cls = type(self).__name__
        args = [repr(super().__str__()), *self._context()]
        return f"{cls}({', '.join(args)})"


class MalformedUriError(FileSystemError):
    """Raised when a URI cannot be parsed into an account, container and path."""


class MissingSourceError(FileSystemError):
    """Raised when the source of a copy does not exist."""


class NotFoundError(FileSystemError):
    """Raised when an object vanished between a type check and its use."""


class NotFolderError(FileSystemError):
    """Raised when children are requested from an object that has content."""


class PermissionDenied(FileSystemError):
    """Raised when access is denied by the blob store."""


class BackendUnavailable(FileSystemError):
    """Raised when the blob store cannot be reached."""


class SizeLimitExceededError(FileSystemError):
    """Raised when an object is larger than the store can hold.

    :param size: Size of the object in bytes.
    :param limit: Largest size the store accepts in bytes.
    """

    def __init__(self, message: str = "", *, path: Optional[str] = None, size: int = 0, limit: int = 0) -> None:
        self.size = size
        self.limit = limit
        super().__init__(message, path=path)

    def _context(self) -> list[str]:
        return [*super()._context(), f"size={self.size}", f"limit={self.limit}"]


class CapabilityNotSupported(FileSystemError):
    """Raised when an operation requires a capability the filesystem lacks.

    :param capability: The name of the unsupported capability.
    """

    def __init__(self, message: str = "", *, path: Optional[str] = None, capability: str = "") -> None:
        self.capability = capability
        super().__init__(message, path=path)

    def _context(self) -> list[str]:
        ctx = super()._context()
        if self.capability:
            ctx.append(f"capability={self.capability!r}")
        return ctx


class CopyFailedError(FileSystemError):
    """Raised when copying one entry of a tree fails.

    The underlying store or I/O error is chained as ``__cause__``.

    :param source: URI of the source entry.
    :param destination: URI of the destination entry.
    """

    def __init__(
        self,
        message: str = "",
        *,
        source: Optional[str] = None,
        destination: Optional[str] = None,
    ) -> None:
        self.source = source
        self.destination = destination
        super().__init__(message, path=destination)

    def _context(self) -> list[str]:
        ctx = []
        if self.source is not None:
            ctx.append(f"source={self.source!r}")
        if self.destination is not None:
            ctx.append(f"destination={self.destination!r}")
        return ctx


class UnsupportedCopySourceError(CopyFailedError):
    """Raised when a copy source has neither content nor children."""
