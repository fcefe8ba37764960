"""Immutable value objects exchanged with the blob store facade."""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime


@dataclasses.dataclass(frozen=True)
class BlobListingEntry:
    """One entry of a hierarchical listing.

    :param name: Full key of the blob, or the prefix ending with the delimiter.
    :param is_prefix: ``True`` when the entry is a virtual folder.
    :param size: Blob size in bytes, ``0`` for prefixes.
    """

    name: str
    is_prefix: bool
    size: int = 0

    @property
    def base_name(self) -> str:
        """Last path segment, with the trailing slash kept for prefixes."""
        segment = self.name.rstrip("/").rsplit("/", 1)[-1]
        if self.name.endswith("/"):
            return segment + "/"
        return segment


@dataclasses.dataclass(frozen=True)
class BlobSnapshot:
    """Properties of a blob captured at one point in time.

    :param size: Content length in bytes.
    :param last_modified: Last modification time reported by the store.
    :param etag: Entity tag, if any.
    :param content_type: MIME type, if any.
    :param copy_status: Status of the last copy into this blob, if any.
    :param copy_status_description: Store-provided detail for ``copy_status``.
    """

    size: int
    last_modified: datetime
    etag: str | None = None
    content_type: str | None = None
    copy_status: str | None = None
    copy_status_description: str | None = None


@dataclasses.dataclass(frozen=True)
class BlockRange:
    """One block of a staged copy: where it comes from and what it is called.

    :param block_id: Block identifier, unique and equal-length within a blob.
    :param offset: Byte offset in the source object.
    :param length: Number of bytes in the block.
    """

    block_id: str
    offset: int
    length: int
