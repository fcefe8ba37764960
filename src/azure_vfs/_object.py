"""AzureFileObject — a file or folder backed by one blob container."""

from __future__ import annotations

import enum
import io
import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from azure_vfs._capabilities import Capability
from azure_vfs._copy import CopyEngine
from azure_vfs._errors import FileSystemError, NotFolderError
from azure_vfs._fileobject import FileObject
from azure_vfs._selectors import Selectors
from azure_vfs._streams import BlobReader, BlobWriter
from azure_vfs._types import FileType, NameScope

if TYPE_CHECKING:
    from azure_vfs._blob import BlobHandle
    from azure_vfs._filesystem import AzureFileSystem
    from azure_vfs._models import BlobListingEntry, BlobSnapshot, BlockRange
    from azure_vfs._name import PathName
    from azure_vfs._selectors import FileSelector

log = logging.getLogger(__name__)


class AttachState(enum.Enum):
    """Whether a file object holds a blob handle, and whether it deleted the blob."""

    UNATTACHED = "unattached"
    ATTACHED = "attached"
    ATTACHED_DELETED = "attached_deleted"


class AzureFileObject(FileObject):
    """A name in a container, resolved lazily against the store.

    The store has no folders: a folder is any key prefix that has blobs
    below it. The type is inferred from a hierarchical listing on first use
    and cached until :meth:`refresh_type`, :meth:`detach` or a write.

    :param name: The name this object is bound to.
    :param filesystem: The filesystem owning the container connection.
    :param known_type: Type already known from a listing, skipping inference.
    """

    def __init__(self, name: PathName, filesystem: AzureFileSystem, *, known_type: FileType | None = None) -> None:
        super().__init__(name)
        self._fs = filesystem
        self._state = AttachState.UNATTACHED
        self._blob: BlobHandle | None = None
        self._snapshot: BlobSnapshot | None = None
        self._type: FileType | None = known_type

    @property
    def filesystem(self) -> AzureFileSystem:
        return self._fs

    @property
    def attach_state(self) -> AttachState:
        return self._state

    # region: lifecycle

    def attach(self) -> None:
        """Bind to the blob handle for this name. Local only; idempotent."""
        if self._state is not AttachState.UNATTACHED:
            return
        if not self._name.is_root:
            self._blob = self._fs.container.get_blob(self._name.key)
        self._state = AttachState.ATTACHED
        log.debug("Attached %s", self)

    def detach(self) -> None:
        """Drop the blob handle and every cached value."""
        if self._state is AttachState.UNATTACHED:
            return
        self._blob = None
        self._snapshot = None
        self._type = None
        self._state = AttachState.UNATTACHED
        log.debug("Detached %s", self)

    def blob_handle(self) -> BlobHandle:
        """Handle of the blob stored under this name.

        :raises FileSystemError: For the container root, which is not a blob.
        """
        self.attach()
        if self._blob is None:
            raise FileSystemError("The container root has no blob", path=self._name.uri)
        return self._blob

    def refresh(self) -> None:
        """Nothing is cached that outlives the next type check."""

    def close(self) -> None:
        self.detach()

    # endregion

    # region: type inference

    def get_type(self) -> FileType:
        if self._name.is_root:
            return FileType.FOLDER
        self.attach()
        if self._state is AttachState.ATTACHED_DELETED:
            return FileType.IMAGINARY
        if self._type is not None and self._type is not FileType.IMAGINARY:
            return self._type
        if self._name.type is FileType.FOLDER:
            self._type = FileType.FOLDER
        else:
            self._type = self._infer_type()
        return self._type

    def refresh_type(self) -> FileType:
        """Forget the cached type and the deleted marker, then infer again."""
        self.attach()
        if self._state is AttachState.ATTACHED_DELETED:
            self._state = AttachState.ATTACHED
        self._type = None
        self._snapshot = None
        return self.get_type()

    def _infer_type(self) -> FileType:
        key = self._name.key
        folder_key = key + "/"
        entries = self._fs.container.list_by_hierarchy(key, page_size=self._fs.options.listing_page_size)
        for entry in entries:
            if entry.name == key and not entry.is_prefix:
                return FileType.FILE
            if entry.is_prefix and entry.name in (key, folder_key):
                return FileType.FOLDER
            if entry.name > folder_key:
                # Listings are sorted; nothing further can match.
                break
        return FileType.IMAGINARY

    # endregion

    # region: content

    def _properties(self) -> BlobSnapshot:
        if self._snapshot is None:
            self._snapshot = self.blob_handle().get_properties()
        return self._snapshot

    def get_content_size(self) -> int:
        return self._properties().size

    def get_input_stream(self) -> io.BufferedReader:
        """Open a seekable, buffered reader over the blob content."""
        raw = BlobReader(self.blob_handle(), self.get_content_size(), chunk_size=self._fs.options.read_buffer_size)
        return io.BufferedReader(raw, buffer_size=self._fs.options.read_buffer_size)

    def read_range(self, offset: int, length: int) -> bytes:
        """Read ``length`` bytes at ``offset`` in one request."""
        return self.blob_handle().download(offset, length)

    def get_output_stream(self, *, append: bool = False, block_size: int | None = None) -> BlobWriter:  # type: ignore[override]
        """Open a writer replacing the blob content when closed.

        :param append: Not supported by this store.
        :param block_size: Bytes per staged block; defaults to the configured size.
        :raises CapabilityNotSupported: If ``append`` is requested.
        """
        if append:
            self._fs.capabilities.require(Capability.APPEND_CONTENT, self._name)
        return BlobWriter(
            self.blob_handle(),
            block_size or self._fs.options.default_block_size,
            on_commit=self._content_written,
        )

    def _content_written(self) -> None:
        if self._state is AttachState.ATTACHED_DELETED:
            self._state = AttachState.ATTACHED
        self._type = None
        self._snapshot = None

    def committed_blocks(self) -> list[BlockRange]:
        """Committed blocks of the blob, in content order."""
        return self.blob_handle().list_committed_blocks()

    # endregion

    # region: listing

    def _list_entries(self) -> list[BlobListingEntry]:
        if not self.get_type().has_children:
            raise NotFolderError(f"Not a folder: {self._name.uri}", path=self._name.uri)
        prefix = "" if self._name.is_root else self._name.key + "/"
        entries = self._fs.container.list_by_hierarchy(prefix, page_size=self._fs.options.listing_page_size)
        # A blob named exactly like the prefix is a folder placeholder.
        return [entry for entry in entries if entry.name != prefix]

    def list_children(self) -> list[str]:
        """Base names of the immediate children; folders end with ``/``.

        :raises NotFolderError: If this object is not a folder.
        """
        return [entry.base_name for entry in self._list_entries()]

    def get_children(self) -> list[FileObject]:
        children: list[FileObject] = []
        for entry in self._list_entries():
            child_name = self._name.resolve(entry.base_name, NameScope.CHILD)
            known = FileType.FOLDER if entry.is_prefix else FileType.FILE
            children.append(self._fs.create_file_object(child_name, known_type=known))
        return children

    def resolve_file(self, relative: str, scope: NameScope = NameScope.FILE_SYSTEM) -> AzureFileObject:
        return self._fs.create_file_object(self._name.resolve(relative, scope))

    # endregion

    # region: mutation

    def create_folder(self) -> None:
        """Folders exist implicitly; nothing is written."""
        log.debug("Not creating folder %s: folders are implied by blob keys", self)

    def delete(self) -> bool:
        """Delete the blob if this is a file; either way the object reads as gone.

        :returns: ``True`` if a blob was removed.
        """
        removed = False
        if self.get_type() is FileType.FILE:
            self.blob_handle().delete()
            removed = True
            log.debug("Deleted %s", self)
        self.attach()
        self._state = AttachState.ATTACHED_DELETED
        self._type = FileType.IMAGINARY
        self._snapshot = None
        return removed

    def delete_all(self, selector: FileSelector = Selectors.SELECT_ALL) -> int:
        """Delete the selected objects of this tree, children before folders.

        :returns: Number of blobs removed.
        """
        removed = 0
        for item in self.find_files(selector, depth_first=True):
            if item.delete():
                removed += 1
        return removed

    def can_rename_to(self, other: FileObject) -> bool:
        return self._fs.capabilities.supports(Capability.RENAME)

    def copy_from(self, source: FileObject, selector: FileSelector = Selectors.SELECT_ALL) -> int:
        """Copy the selected tree under ``source`` onto this object.

        :returns: Number of entries copied.
        :raises MissingSourceError: If ``source`` does not exist.
        :raises CopyFailedError: If an entry cannot be copied.
        """
        return CopyEngine(self._fs.options).copy_tree(self, source, selector)

    # endregion

    # region: metadata

    def get_last_modified_time(self) -> int:
        """Last modification in milliseconds since the epoch, ``0`` if absent."""
        if self._name.is_root:
            return 0
        handle = self.blob_handle()
        if not handle.exists():
            return 0
        self._snapshot = handle.get_properties()
        return int(self._snapshot.last_modified.timestamp() * 1000)

    def set_last_modified_time(self, modtime: int) -> bool:
        """The store sets modification times itself; accepted and ignored."""
        log.debug("Ignoring last-modified time %d for %s", modtime, self)
        return True

    def get_signed_url(self, validity_seconds: int | None = None) -> str:
        """Return a read-only URL for the blob, signed for a limited time.

        :param validity_seconds: Lifetime of the URL; defaults to the configured validity.
        """
        options = self._fs.options
        if validity_seconds is None:
            validity_seconds = options.signed_url_validity_seconds
        now = datetime.now(timezone.utc)
        return self.blob_handle().generate_read_url(
            start=now - timedelta(seconds=options.signed_url_start_skew_seconds),
            expiry=now + timedelta(seconds=validity_seconds),
            https_only=options.signed_url_https_only,
        )

    def account_identity(self) -> str | None:
        return self._fs.account_name

    # endregion
