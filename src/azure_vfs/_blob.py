"""Thin facade over the azure-storage-blob container and blob clients.

Everything the filesystem needs from the store goes through
:class:`ContainerHandle` and :class:`BlobHandle`. SDK exceptions never leave
this module unmapped.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from azure.core.exceptions import (
    AzureError,
    ClientAuthenticationError,
    ResourceNotFoundError,
    ServiceRequestError,
    ServiceResponseError,
)
from azure.storage.blob import BlobBlock, BlobPrefix, BlobSasPermissions, BlobServiceClient, generate_blob_sas

from azure_vfs._config import MEGABYTE
from azure_vfs._errors import BackendUnavailable, FileSystemError, NotFoundError, PermissionDenied
from azure_vfs._models import BlobListingEntry, BlobSnapshot, BlockRange

if TYPE_CHECKING:
    from collections.abc import Iterator
    from datetime import datetime

    from azure.storage.blob import BlobClient, ContainerClient, UserDelegationKey

log = logging.getLogger(__name__)

DELIMITER = "/"

# Block blob limits enforced by the store.
MAX_BLOCKS = 50_000
MAX_BLOCK_SIZE = 100 * MEGABYTE
MAX_BLOB_SIZE = MAX_BLOCK_SIZE * MAX_BLOCKS

COPY_PENDING = "pending"
COPY_SUCCESS = "success"

# Extra lifetime requested for user delegation keys so later URLs can reuse them.
DELEGATION_KEY_MARGIN = timedelta(hours=1)


@contextmanager
def map_azure_errors(path: str = "") -> Iterator[None]:
    """Map azure-core exceptions to azure_vfs errors, chaining the original."""
    try:
        yield
    except FileSystemError:
        raise
    except ResourceNotFoundError as exc:
        raise NotFoundError(f"Not found: {path}", path=path) from exc
    except ClientAuthenticationError as exc:
        raise PermissionDenied(f"Permission denied: {path}", path=path) from exc
    except (ServiceRequestError, ServiceResponseError) as exc:
        raise BackendUnavailable(str(exc), path=path) from exc
    except AzureError as exc:
        raise FileSystemError(str(exc), path=path) from exc


class ContainerHandle:
    """Container-level operations shared by every object of one filesystem.

    :param client: The SDK container client; calls on it are independent
        per blob name, so one handle serves many file objects.
    """

    def __init__(self, client: ContainerClient) -> None:
        self._client = client
        self._delegation_key: tuple[datetime, datetime, UserDelegationKey] | None = None

    @property
    def account_name(self) -> str:
        return str(self._client.account_name)

    @property
    def container_name(self) -> str:
        return str(self._client.container_name)

    @property
    def client(self) -> ContainerClient:
        return self._client

    def get_blob(self, name: str) -> BlobHandle:
        """Return a handle for ``name``. Local only; no request is made."""
        return BlobHandle(self._client.get_blob_client(name), self)

    def exists(self) -> bool:
        with map_azure_errors(self.container_name):
            return bool(self._client.exists())

    def list_by_hierarchy(self, prefix: str, *, page_size: int | None = None) -> Iterator[BlobListingEntry]:
        """List keys starting with ``prefix``, grouped at the next delimiter.

        Entries arrive sorted by name; keys continuing past the delimiter
        are folded into one prefix entry ending with ``/``.
        """
        log.debug("Listing %s/%s* by hierarchy", self.container_name, prefix)
        with map_azure_errors(prefix):
            items = self._client.walk_blobs(
                name_starts_with=prefix or None,
                delimiter=DELIMITER,
                results_per_page=page_size,
            )
            for item in items:
                if isinstance(item, BlobPrefix):
                    yield BlobListingEntry(name=item.name, is_prefix=True)
                else:
                    yield BlobListingEntry(name=item.name, is_prefix=False, size=int(item.size or 0))

    def user_delegation_key(self, start: datetime, expiry: datetime) -> UserDelegationKey:
        """Return a user delegation key valid from ``start`` through ``expiry``.

        The key signs URLs for token credentials. It is cached on the handle
        and reused while it covers the requested window; a new key is valid
        :data:`DELEGATION_KEY_MARGIN` past ``expiry``.
        """
        cached = self._delegation_key
        if cached is not None and cached[0] <= start and expiry <= cached[1]:
            return cached[2]
        key_expiry = expiry + DELEGATION_KEY_MARGIN
        account_url = f"{self._client.scheme}://{self._client.primary_hostname}"
        log.debug("Requesting user delegation key from %s valid until %s", account_url, key_expiry)
        with map_azure_errors(account_url), BlobServiceClient(
            account_url=account_url, credential=self._client.credential
        ) as service:
            key = service.get_user_delegation_key(key_start_time=start, key_expiry_time=key_expiry)
        self._delegation_key = (start, key_expiry, key)
        return key

    def close(self) -> None:
        self._delegation_key = None
        self._client.close()


class BlobHandle:
    """Operations on one blob.

    :param client: The SDK blob client.
    :param container: The container handle the blob belongs to.
    """

    def __init__(self, client: BlobClient, container: ContainerHandle) -> None:
        self._client = client
        self._container = container

    @property
    def name(self) -> str:
        return str(self._client.blob_name)

    @property
    def url(self) -> str:
        """Blob URL without any query string."""
        return str(self._client.url).split("?", 1)[0]

    # region: state

    def exists(self) -> bool:
        with map_azure_errors(self.name):
            return bool(self._client.exists())

    def get_properties(self) -> BlobSnapshot:
        with map_azure_errors(self.name):
            props = self._client.get_blob_properties()
        content_settings = getattr(props, "content_settings", None)
        copy = getattr(props, "copy", None)
        return BlobSnapshot(
            size=int(props.size or 0),
            last_modified=props.last_modified,
            etag=props.etag,
            content_type=getattr(content_settings, "content_type", None),
            copy_status=getattr(copy, "status", None),
            copy_status_description=getattr(copy, "status_description", None),
        )

    def delete(self) -> None:
        with map_azure_errors(self.name):
            self._client.delete_blob(delete_snapshots="include")

    # endregion

    # region: content

    def download(self, offset: int, length: int) -> bytes:
        """Read ``length`` bytes starting at ``offset``."""
        with map_azure_errors(self.name):
            return bytes(self._client.download_blob(offset=offset, length=length).readall())

    def stage_block(self, block_id: str, data: bytes) -> None:
        with map_azure_errors(self.name):
            self._client.stage_block(block_id=block_id, data=data, length=len(data))

    def commit_blocks(self, block_ids: list[str]) -> None:
        """Atomically make the ordered ``block_ids`` the content of the blob."""
        with map_azure_errors(self.name):
            self._client.commit_block_list([BlobBlock(block_id=block_id) for block_id in block_ids])

    # endregion

    # region: server-side copy

    def list_committed_blocks(self) -> list[BlockRange]:
        """Committed blocks in order, with their byte ranges in the blob."""
        with map_azure_errors(self.name):
            committed, _uncommitted = self._client.get_block_list("committed")
        ranges: list[BlockRange] = []
        offset = 0
        for block in committed:
            size = int(block.size or 0)
            ranges.append(BlockRange(block_id=block.id, offset=offset, length=size))
            offset += size
        return ranges

    def stage_block_from_url(self, block: BlockRange, source_url: str) -> None:
        with map_azure_errors(self.name):
            self._client.stage_block_from_url(
                block_id=block.block_id,
                source_url=source_url,
                source_offset=block.offset,
                source_length=block.length,
            )

    def copy_from_url(self, source_url: str) -> None:
        """Copy synchronously; the store returns once the copy is done."""
        with map_azure_errors(self.name):
            result = self._client.start_copy_from_url(source_url, requires_sync=True)
        status = _copy_status(result)
        if status != COPY_SUCCESS:
            raise FileSystemError(f"Synchronous copy ended with status {status!r}", path=self.name)

    def begin_copy_from_url(self, source_url: str) -> tuple[str | None, str | None]:
        """Start an asynchronous copy and return ``(copy_id, status)``."""
        with map_azure_errors(self.name):
            result = self._client.start_copy_from_url(source_url)
        return _copy_id(result), _copy_status(result)

    def wait_for_copy(self, copy_id: str | None, *, poll_interval: float, timeout: float | None) -> BlobSnapshot:
        """Poll the blob until its pending copy finishes.

        :raises FileSystemError: If the copy fails, is aborted or times out.
        """
        from tenacity import Retrying, before_sleep_log, retry_if_result, stop_after_delay, stop_never, wait_fixed

        retrying = Retrying(
            retry=retry_if_result(lambda snap: snap.copy_status == COPY_PENDING),
            wait=wait_fixed(poll_interval),
            stop=stop_after_delay(timeout) if timeout is not None else stop_never,
            before_sleep=before_sleep_log(log, logging.DEBUG),  # type: ignore[arg-type,unused-ignore]
            retry_error_callback=lambda state: state.outcome.result() if state.outcome else None,
        )
        snapshot: BlobSnapshot = retrying(self.get_properties)
        if snapshot.copy_status == COPY_PENDING:
            if copy_id is not None:
                with map_azure_errors(self.name):
                    self._client.abort_copy(copy_id)
            raise FileSystemError(f"Copy did not finish within {timeout} seconds", path=self.name)
        if snapshot.copy_status != COPY_SUCCESS:
            raise FileSystemError(
                f"Copy ended with status {snapshot.copy_status!r}: {snapshot.copy_status_description}",
                path=self.name,
            )
        return snapshot

    def generate_read_url(self, *, start: datetime, expiry: datetime, https_only: bool = True) -> str:
        """Return the blob URL signed for read access between ``start`` and ``expiry``.

        The account key signs the URL when the client has one; token
        credentials sign with a user delegation key.

        :raises PermissionDenied: If the client holds no credential able to sign.
        """
        credential: Any = self._client.credential
        account_key = getattr(credential, "account_key", None)
        if account_key is None and credential is None:
            if "?" in str(self._client.url):
                # Clients built from a SAS token already carry a signed query.
                return str(self._client.url)
            raise PermissionDenied("No credential available to sign URLs", path=self.name)

        signing: dict[str, Any] = {}
        if account_key is not None:
            signing["account_key"] = account_key
        else:
            signing["user_delegation_key"] = self._container.user_delegation_key(start, expiry)

        sas = generate_blob_sas(
            account_name=self._client.account_name,
            container_name=self._client.container_name,
            blob_name=self._client.blob_name,
            permission=BlobSasPermissions(read=True),
            start=start,
            expiry=expiry,
            protocol="https" if https_only else "https,http",
            **signing,
        )
        return f"{self.url}?{sas}"

    # endregion


def _copy_status(result: Any) -> str | None:
    if isinstance(result, dict):
        return result.get("copy_status")
    return getattr(result, "copy_status", None)


def _copy_id(result: Any) -> str | None:
    if isinstance(result, dict):
        return result.get("copy_id")
    return getattr(result, "copy_id", None)
