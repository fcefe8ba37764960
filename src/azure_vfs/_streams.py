"""Raw stream adapters for reading and writing blob content."""

from __future__ import annotations

import io
import logging
import uuid
from typing import TYPE_CHECKING, Any

from azure_vfs._blob import MAX_BLOB_SIZE, MAX_BLOCKS
from azure_vfs._errors import SizeLimitExceededError

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from azure_vfs._blob import BlobHandle

log = logging.getLogger(__name__)


class BlobReader(io.RawIOBase):
    """Seekable reader issuing one ranged download per ``readinto`` call.

    Wrap it in :class:`io.BufferedReader` to control the request size.
    :meth:`readall` bypasses the buffer and fetches the rest of the blob in
    requests of at most ``chunk_size`` bytes.

    :param blob: Blob to read.
    :param size: Content length at open time; reads stop there.
    :param chunk_size: Largest request :meth:`readall` makes; ``None``
        reads the rest in one request.
    """

    def __init__(self, blob: BlobHandle, size: int, chunk_size: int | None = None) -> None:
        super().__init__()
        if chunk_size is not None and chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self._blob = blob
        self._size = size
        self._chunk_size = chunk_size
        self._pos = 0

    @property
    def size(self) -> int:
        return self._size

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int:
        if self.closed:
            raise ValueError("I/O operation on closed blob reader")
        view = memoryview(buffer).cast("B")
        remaining = self._size - self._pos
        if remaining <= 0 or len(view) == 0:
            return 0
        data = self._blob.download(self._pos, min(len(view), remaining))
        n = len(data)
        view[:n] = data
        self._pos += n
        return n

    def readall(self) -> bytes:
        if self.closed:
            raise ValueError("I/O operation on closed blob reader")
        parts: list[bytes] = []
        while self._pos < self._size:
            length = self._size - self._pos
            if self._chunk_size is not None:
                length = min(length, self._chunk_size)
            data = self._blob.download(self._pos, length)
            if not data:
                break
            parts.append(data)
            self._pos += len(data)
        return b"".join(parts)

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        if whence == io.SEEK_SET:
            target = offset
        elif whence == io.SEEK_CUR:
            target = self._pos + offset
        elif whence == io.SEEK_END:
            target = self._size + offset
        else:
            raise ValueError(f"Invalid whence: {whence}")
        if target < 0:
            raise ValueError(f"Negative seek position {target}")
        self._pos = target
        return self._pos

    def tell(self) -> int:
        return self._pos


class BlobWriter(io.RawIOBase):
    """Writer that stages fixed-size blocks and commits them on close.

    Nothing becomes visible in the store until :meth:`close` commits the
    block list, which replaces any previous content. Leaving a ``with``
    block through an exception aborts instead, discarding staged blocks,
    and so does dropping a writer that was never closed.

    :param blob: Blob to write.
    :param block_size: Bytes per staged block.
    :param on_commit: Called after a successful commit.
    """

    def __init__(self, blob: BlobHandle, block_size: int, on_commit: Callable[[], None] | None = None) -> None:
        super().__init__()
        if block_size <= 0:
            raise ValueError(f"block_size must be positive, got {block_size}")
        self._blob = blob
        self._block_size = block_size
        self._on_commit = on_commit
        self._buffer = bytearray()
        self._block_ids: list[str] = []
        self._id_prefix = uuid.uuid4().hex
        self._written = 0
        self._aborted = False

    @property
    def block_size(self) -> int:
        return self._block_size

    @property
    def block_count(self) -> int:
        """Blocks staged so far."""
        return len(self._block_ids)

    def writable(self) -> bool:
        return True

    def write(self, data: Any) -> int:
        if self.closed:
            raise ValueError("I/O operation on closed blob writer")
        chunk = memoryview(data).cast("B")
        n = len(chunk)
        if self._written + n > MAX_BLOB_SIZE:
            raise SizeLimitExceededError(
                "Content exceeds the largest blob the store accepts",
                path=self._blob.name,
                size=self._written + n,
                limit=MAX_BLOB_SIZE,
            )
        self._buffer += chunk
        self._written += n
        while len(self._buffer) >= self._block_size:
            self._stage(bytes(self._buffer[: self._block_size]))
            del self._buffer[: self._block_size]
        return n

    def _stage(self, data: bytes) -> None:
        if len(self._block_ids) >= MAX_BLOCKS:
            raise SizeLimitExceededError(
                f"Content needs more than {MAX_BLOCKS} blocks of {self._block_size} bytes",
                path=self._blob.name,
                size=self._written,
                limit=MAX_BLOCKS * self._block_size,
            )
        block_id = f"{self._id_prefix}-{len(self._block_ids):06d}"
        self._blob.stage_block(block_id, data)
        self._block_ids.append(block_id)

    def close(self) -> None:
        if self.closed:
            return
        try:
            if not self._aborted:
                if self._buffer:
                    self._stage(bytes(self._buffer))
                    self._buffer.clear()
                self._blob.commit_blocks(self._block_ids)
                log.debug("Committed %d blocks (%d bytes) to %s", len(self._block_ids), self._written, self._blob.name)
                if self._on_commit is not None:
                    self._on_commit()
        finally:
            super().close()

    def abort(self) -> None:
        """Close without committing; staged blocks are left for the store to expire."""
        if self.closed:
            return
        self._aborted = True
        self._buffer.clear()
        log.debug("Aborted write to %s after %d staged blocks", self._blob.name, len(self._block_ids))
        self.close()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            self.abort()
        else:
            self.close()

    def __del__(self) -> None:
        # Unclosed writers are discarded, never committed.
        self._aborted = True
        self.close()
