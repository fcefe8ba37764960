"""Copy engine — picks server-side or streamed transfer for each copied entry."""

from __future__ import annotations

import logging
import shutil
from typing import TYPE_CHECKING, Protocol, cast, runtime_checkable

from azure_vfs._blob import MAX_BLOB_SIZE, MAX_BLOCKS
from azure_vfs._errors import (
    CopyFailedError,
    MissingSourceError,
    SizeLimitExceededError,
    UnsupportedCopySourceError,
)
from azure_vfs._models import BlockRange
from azure_vfs._types import FileType, NameScope

if TYPE_CHECKING:
    from azure_vfs._config import FileSystemOptions
    from azure_vfs._fileobject import FileObject
    from azure_vfs._object import AzureFileObject
    from azure_vfs._selectors import FileSelector

log = logging.getLogger(__name__)


@runtime_checkable
class ServerSideSource(Protocol):
    """What a source must offer to be copied inside the store."""

    def get_content_size(self) -> int: ...

    def get_signed_url(self, validity_seconds: int | None = None) -> str: ...

    def committed_blocks(self) -> list[BlockRange]: ...


def compute_block_size(size: int, default_block_size: int) -> int:
    """Block size for transferring ``size`` bytes.

    The default is kept while ``size`` fits in the store's block count;
    beyond that the block grows to ``ceil(size / MAX_BLOCKS)``.

    :raises SizeLimitExceededError: If ``size`` exceeds the largest blob the store accepts.
    """
    if size > MAX_BLOB_SIZE:
        raise SizeLimitExceededError(
            "Object exceeds the largest blob the store accepts",
            size=size,
            limit=MAX_BLOB_SIZE,
        )
    if size <= default_block_size * MAX_BLOCKS:
        return default_block_size
    return -(-size // MAX_BLOCKS)


def plan_uniform_blocks(size: int, block_size: int) -> list[BlockRange]:
    """Split ``size`` bytes into consecutive ranges of ``block_size``."""
    count = -(-size // block_size)
    width = len(str(max(count - 1, 0)))
    return [
        BlockRange(
            block_id=f"block-{index:0{width}d}",
            offset=index * block_size,
            length=min(block_size, size - index * block_size),
        )
        for index in range(count)
    ]


def can_copy_server_side(source: FileObject, destination: FileObject) -> bool:
    """Whether ``source`` can be copied to ``destination`` inside the store.

    Both must live in the same storage account, and ``source`` must offer
    the signed URL and block list a server-side copy reads. Signed source
    URLs are scoped to one account, so copies across accounts fall back to
    streaming.
    """
    if not isinstance(source, ServerSideSource):
        return False
    source_account = source.account_identity()
    return source_account is not None and source_account == destination.account_identity()


class CopyEngine:
    """Copies a selected source tree onto a destination root.

    :param options: Block size, threshold and signed-URL settings.
    """

    def __init__(self, options: FileSystemOptions) -> None:
        self._options = options

    def copy_tree(self, destination: AzureFileObject, source: FileObject, selector: FileSelector) -> int:
        """Copy every entry ``selector`` picks under ``source`` to the same place under ``destination``.

        Entries copied before a failure stay in place.

        :returns: Number of entries copied.
        :raises MissingSourceError: If ``source`` does not exist.
        :raises CopyFailedError: If an entry cannot be copied.
        :raises SizeLimitExceededError: If an entry is too large for the store.
        """
        if not source.exists():
            raise MissingSourceError(f"Copy source does not exist: {source.name.uri}", path=source.name.uri)

        destination.attach()
        copied = 0
        for entry in source.find_files(selector):
            entry_type = entry.get_type()
            if entry_type is FileType.FOLDER:
                continue
            relative = source.name.relative_name(entry.name)
            target = destination.resolve_file(relative, NameScope.DESCENDENT_OR_SELF)
            self._copy_entry(entry, entry_type, target)
            copied += 1
        return copied

    def _copy_entry(self, source: FileObject, source_type: FileType, destination: AzureFileObject) -> None:
        try:
            if destination.exists() and destination.get_type() is not source_type:
                log.debug("Removing %s before copy: type differs from source", destination)
                destination.delete_all()

            if source_type.has_children:
                destination.create_folder()
            elif can_copy_server_side(source, destination):
                self._server_side_copy(cast(ServerSideSource, source), destination)
            elif source_type.has_content:
                self._stream_copy(source, destination)
            else:
                raise UnsupportedCopySourceError(
                    f"Nothing to copy: {source} has neither content nor children",
                    source=source.name.uri,
                    destination=destination.name.uri,
                )
        except (CopyFailedError, SizeLimitExceededError):
            raise
        except Exception as exc:
            raise CopyFailedError(
                f"Could not copy {source} to {destination}",
                source=source.name.uri,
                destination=destination.name.uri,
            ) from exc

    # region: server-side copy

    def _server_side_copy(self, source: ServerSideSource, destination: AzureFileObject) -> None:
        size = source.get_content_size()
        source_url = source.get_signed_url(self._options.signed_url_validity_seconds)
        if size > self._options.server_side_copy_threshold:
            if self._options.large_copy_mode == "async_copy":
                self._async_copy(source_url, destination)
            else:
                self._staged_copy(source, source_url, size, destination)
        else:
            log.info("Copying %s to %s by URL (%d bytes)", source, destination, size)
            destination.blob_handle().copy_from_url(source_url)
        destination.refresh_type()

    def _staged_copy(self, source: ServerSideSource, source_url: str, size: int, destination: AzureFileObject) -> None:
        block_size = compute_block_size(size, self._options.default_block_size)
        blocks = source.committed_blocks()
        if not blocks or sum(b.length for b in blocks) != size:
            # Blobs written in a single put have no block list to mirror.
            blocks = plan_uniform_blocks(size, block_size)
        log.info("Copying %s to %s by staging %d blocks (%d bytes)", source, destination, len(blocks), size)
        handle = destination.blob_handle()
        for block in blocks:
            log.debug("Staging block %s [%d, +%d) into %s", block.block_id, block.offset, block.length, destination)
            handle.stage_block_from_url(block, source_url)
        handle.commit_blocks([b.block_id for b in blocks])

    def _async_copy(self, source_url: str, destination: AzureFileObject) -> None:
        handle = destination.blob_handle()
        copy_id, status = handle.begin_copy_from_url(source_url)
        log.info("Started asynchronous copy %s into %s (status %s)", copy_id, destination, status)
        handle.wait_for_copy(
            copy_id,
            poll_interval=self._options.copy_poll_interval_seconds,
            timeout=self._options.copy_timeout_seconds,
        )

    # endregion

    # region: streamed copy

    def _stream_copy(self, source: FileObject, destination: AzureFileObject) -> None:
        size = source.get_content_size()
        block_size = compute_block_size(size, self._options.default_block_size)
        log.info("Streaming %s to %s (%d bytes, %d-byte blocks)", source, destination, size, block_size)
        reader = source.get_input_stream()
        try:
            writer = destination.get_output_stream(block_size=block_size)
            try:
                shutil.copyfileobj(reader, writer, self._options.read_buffer_size)
            except BaseException:
                writer.abort()
                raise
            writer.close()
        finally:
            reader.close()
        destination.refresh_type()

    # endregion
