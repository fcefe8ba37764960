"""Tests for AzureFileObject against the in-memory store."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from urllib.parse import parse_qs, urlsplit

import pytest

from azure_vfs import _blob
from azure_vfs._blob import ContainerHandle
from azure_vfs._config import MEGABYTE, FileSystemOptions
from azure_vfs._errors import CapabilityNotSupported, FileSystemError, NotFolderError, NotFoundError
from azure_vfs._filesystem import AzureFileSystem
from azure_vfs._name import PathName
from azure_vfs._object import AttachState, AzureFileObject
from azure_vfs._types import FileType
from tests.fake_azure import ACCOUNT, CONTAINER, ROOT_URI, FakeTokenCredential

if TYPE_CHECKING:
    from azure_vfs._manager import FileSystemManager
    from tests.fake_azure import FakeAzure


def _listings(azure: FakeAzure) -> int:
    return azure.methods().count("walk_blobs")


def _token_filesystem(azure: FakeAzure, options: FileSystemOptions) -> AzureFileSystem:
    client = azure.container_client(ACCOUNT, CONTAINER, credential=FakeTokenCredential())
    return AzureFileSystem(PathName("azbs", ACCOUNT, CONTAINER, "/"), ContainerHandle(client), options)  # type: ignore[arg-type]


# region: type inference


class TestTypeInference:
    def test_declared_folder_needs_no_request(self, manager: FileSystemManager, azure: FakeAzure) -> None:
        folder = manager.resolve_file(f"{ROOT_URI}/nothing/here/")
        assert folder.get_type() is FileType.FOLDER
        assert azure.calls == []

    def test_root_is_folder(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        assert fs.get_root().get_type() is FileType.FOLDER
        assert azure.calls == []

    def test_missing_is_imaginary(self, fs: AzureFileSystem) -> None:
        obj = fs.resolve_file("missing.txt")
        assert obj.get_type() is FileType.IMAGINARY
        assert obj.exists() is False

    def test_single_blob_is_file(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        azure.put(ACCOUNT, CONTAINER, "p", b"x")
        obj = fs.resolve_file("p")
        assert obj.get_type() is FileType.FILE
        assert obj.is_file()

    def test_blobs_below_are_folder(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        azure.put(ACCOUNT, CONTAINER, "p/child1", b"1")
        azure.put(ACCOUNT, CONTAINER, "p/child2", b"2")
        obj = fs.resolve_file("p")
        assert obj.get_type() is FileType.FOLDER
        assert obj.is_folder()
        assert sorted(obj.list_children()) == ["child1", "child2"]

    def test_declared_file_is_reverified(self, manager: FileSystemManager, azure: FakeAzure) -> None:
        azure.put(ACCOUNT, CONTAINER, "p/child", b"1")
        obj = manager.resolve_file(f"{ROOT_URI}/p")
        assert obj.name.type is FileType.FILE
        assert obj.get_type() is FileType.FOLDER

    def test_keys_sharing_a_prefix_do_not_match(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        azure.put(ACCOUNT, CONTAINER, "dir-a", b"")
        azure.put(ACCOUNT, CONTAINER, "dir0", b"")
        azure.put(ACCOUNT, CONTAINER, "dirx/y", b"")
        assert fs.resolve_file("dir").get_type() is FileType.IMAGINARY

    def test_placeholder_blob_is_folder(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        azure.put(ACCOUNT, CONTAINER, "empty/", b"")
        obj = fs.resolve_file("empty")
        assert obj.get_type() is FileType.FOLDER
        assert obj.list_children() == []

    def test_blob_wins_over_prefix_of_same_name(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        azure.put(ACCOUNT, CONTAINER, "both", b"file")
        azure.put(ACCOUNT, CONTAINER, "both/child", b"child")
        assert fs.resolve_file("both").get_type() is FileType.FILE

    def test_type_is_cached(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        azure.put(ACCOUNT, CONTAINER, "p", b"x")
        obj = fs.resolve_file("p")
        obj.get_type()
        obj.get_type()
        assert _listings(azure) == 1

    def test_cached_imaginary_is_reverified(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        obj = fs.resolve_file("late")
        assert obj.get_type() is FileType.IMAGINARY
        azure.put(ACCOUNT, CONTAINER, "late", b"x")
        assert obj.get_type() is FileType.FILE

    def test_detach_forgets_type(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        azure.put(ACCOUNT, CONTAINER, "p", b"x")
        obj = fs.resolve_file("p")
        obj.get_type()
        obj.detach()
        assert obj.attach_state is AttachState.UNATTACHED
        obj.get_type()
        assert _listings(azure) == 2


# endregion


# region: lifecycle


class TestLifecycle:
    def test_creation_makes_no_request(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        obj = fs.resolve_file("a/b.txt")
        assert obj.attach_state is AttachState.UNATTACHED
        assert azure.calls == []

    def test_attach_is_idempotent(self, fs: AzureFileSystem) -> None:
        obj = fs.resolve_file("a")
        obj.attach()
        handle = obj.blob_handle()
        obj.attach()
        assert obj.blob_handle() is handle
        assert obj.attach_state is AttachState.ATTACHED

    def test_detach_twice_is_safe(self, fs: AzureFileSystem) -> None:
        obj = fs.resolve_file("a")
        obj.detach()
        obj.attach()
        obj.detach()
        obj.detach()
        assert obj.attach_state is AttachState.UNATTACHED

    def test_root_has_no_blob(self, fs: AzureFileSystem) -> None:
        with pytest.raises(FileSystemError, match="root"):
            fs.get_root().blob_handle()

    def test_close_detaches(self, fs: AzureFileSystem) -> None:
        with fs.resolve_file("a") as obj:
            obj.attach()
        assert isinstance(obj, AzureFileObject)
        assert obj.attach_state is AttachState.UNATTACHED

    def test_refresh_and_rename(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        obj = fs.resolve_file("a")
        obj.refresh()
        assert obj.can_rename_to(fs.resolve_file("b")) is False
        assert azure.calls == []

    def test_account_identity(self, fs: AzureFileSystem) -> None:
        assert fs.resolve_file("a").account_identity() == ACCOUNT

    def test_repr(self, fs: AzureFileSystem) -> None:
        assert repr(fs.resolve_file("a")) == f"AzureFileObject('{ROOT_URI}/a')"


# endregion


# region: listing


class TestListing:
    def test_root_children(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        azure.put(ACCOUNT, CONTAINER, "top.txt", b"")
        azure.put(ACCOUNT, CONTAINER, "dir/a.txt", b"")
        azure.put(ACCOUNT, CONTAINER, "dir/sub/b.txt", b"")
        assert fs.get_root().list_children() == ["dir/", "top.txt"]

    def test_nested_children(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        azure.put(ACCOUNT, CONTAINER, "dir/a.txt", b"")
        azure.put(ACCOUNT, CONTAINER, "dir/sub/b.txt", b"")
        assert fs.resolve_file("dir").list_children() == ["a.txt", "sub/"]

    def test_children_objects_are_typed_from_listing(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        azure.put(ACCOUNT, CONTAINER, "dir/a.txt", b"")
        azure.put(ACCOUNT, CONTAINER, "dir/sub/b.txt", b"")
        children = fs.resolve_file("dir").get_children()
        before = _listings(azure)
        assert [(c.name.path, c.get_type()) for c in children] == [
            ("/dir/a.txt", FileType.FILE),
            ("/dir/sub", FileType.FOLDER),
        ]
        assert _listings(azure) == before

    def test_file_has_no_children(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        azure.put(ACCOUNT, CONTAINER, "f", b"")
        with pytest.raises(NotFolderError):
            fs.resolve_file("f").get_children()

    def test_missing_has_no_children(self, fs: AzureFileSystem) -> None:
        with pytest.raises(NotFolderError):
            fs.resolve_file("missing").list_children()

    def test_resolve_file_relative_to_object(self, fs: AzureFileSystem) -> None:
        child = fs.resolve_file("dir").resolve_file("sub/x.txt")
        assert child.name.path == "/dir/sub/x.txt"


# endregion


# region: content


class TestContent:
    def test_size(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        azure.put(ACCOUNT, CONTAINER, "f", b"hello")
        assert fs.resolve_file("f").get_content_size() == 5

    def test_size_of_missing_raises(self, fs: AzureFileSystem) -> None:
        with pytest.raises(NotFoundError):
            fs.resolve_file("missing").get_content_size()

    def test_input_stream(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        azure.put(ACCOUNT, CONTAINER, "f", b"hello world")
        with fs.resolve_file("f").get_input_stream() as stream:
            assert stream.read() == b"hello world"

    def test_full_read_uses_buffer_sized_requests(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        payload = b"z" * (3 * MEGABYTE)
        azure.put(ACCOUNT, CONTAINER, "big.bin", payload)
        with fs.resolve_file("big.bin").get_input_stream() as stream:
            assert stream.read() == payload
        assert azure.methods().count("download_blob") == 3

    def test_input_stream_is_seekable(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        azure.put(ACCOUNT, CONTAINER, "f", b"hello world")
        with fs.resolve_file("f").get_input_stream() as stream:
            stream.seek(6)
            assert stream.read(5) == b"world"
            stream.seek(0)
            assert stream.read(5) == b"hello"

    def test_read_range(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        azure.put(ACCOUNT, CONTAINER, "f", b"0123456789")
        assert fs.resolve_file("f").read_range(3, 4) == b"3456"

    def test_write_and_read_back(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        payload = bytes(range(256)) * 40
        obj = fs.resolve_file("out.bin")
        with obj.get_output_stream(block_size=1000) as out:
            out.write(payload)
        assert azure.get(ACCOUNT, CONTAINER, "out.bin") == payload
        assert obj.get_type() is FileType.FILE
        assert obj.get_content_size() == len(payload)
        assert len(obj.committed_blocks()) == 11

    def test_write_replaces_content(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        azure.put(ACCOUNT, CONTAINER, "f", b"old content")
        obj = fs.resolve_file("f")
        assert obj.get_content_size() == 11
        with obj.get_output_stream() as out:
            out.write(b"new")
        assert obj.get_content_size() == 3
        assert azure.get(ACCOUNT, CONTAINER, "f") == b"new"

    def test_failed_write_commits_nothing(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        obj = fs.resolve_file("partial")
        with pytest.raises(RuntimeError), obj.get_output_stream(block_size=2) as out:
            out.write(b"abcdef")
            raise RuntimeError("interrupted")
        assert "partial" not in azure.names(ACCOUNT, CONTAINER)
        assert "commit_block_list" not in azure.methods()

    def test_append_is_not_supported(self, fs: AzureFileSystem) -> None:
        with pytest.raises(CapabilityNotSupported) as exc_info:
            fs.resolve_file("f").get_output_stream(append=True)
        assert exc_info.value.capability == "append_content"

    def test_root_cannot_be_written(self, fs: AzureFileSystem) -> None:
        with pytest.raises(FileSystemError):
            fs.get_root().get_output_stream()


# endregion


# region: mutation


class TestDelete:
    def test_delete_file(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        azure.put(ACCOUNT, CONTAINER, "f", b"x")
        obj = fs.resolve_file("f")
        assert obj.delete() is True
        assert "f" not in azure.names(ACCOUNT, CONTAINER)
        assert obj.attach_state is AttachState.ATTACHED_DELETED

    def test_deleted_reads_imaginary_without_request(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        azure.put(ACCOUNT, CONTAINER, "f", b"x")
        obj = fs.resolve_file("f")
        obj.delete()
        calls = len(azure.calls)
        assert obj.get_type() is FileType.IMAGINARY
        assert obj.exists() is False
        assert len(azure.calls) == calls

    def test_delete_imaginary_is_quiet(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        obj = fs.resolve_file("missing")
        assert obj.delete() is False
        assert obj.get_type() is FileType.IMAGINARY
        assert "delete_blob" not in azure.methods()

    def test_deleted_marker_wins_over_declared_folder(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        azure.put(ACCOUNT, CONTAINER, "dir/a", b"")
        folder = fs.resolve_file("dir/")
        assert folder.delete() is False
        assert folder.get_type() is FileType.IMAGINARY
        assert folder.refresh_type() is FileType.FOLDER

    def test_refresh_after_delete(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        azure.put(ACCOUNT, CONTAINER, "f", b"x")
        obj = fs.resolve_file("f")
        obj.delete()
        assert obj.refresh_type() is FileType.IMAGINARY
        azure.put(ACCOUNT, CONTAINER, "f", b"y")
        assert obj.refresh_type() is FileType.FILE

    def test_write_after_delete_clears_marker(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        azure.put(ACCOUNT, CONTAINER, "f", b"x")
        obj = fs.resolve_file("f")
        obj.delete()
        with obj.get_output_stream() as out:
            out.write(b"again")
        assert obj.get_type() is FileType.FILE

    def test_delete_all(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        for key in ("dir/a", "dir/b", "dir/sub/c", "keep"):
            azure.put(ACCOUNT, CONTAINER, key, b"")
        folder = fs.resolve_file("dir")
        assert folder.delete_all() == 3
        assert azure.names(ACCOUNT, CONTAINER) == ["keep"]
        assert folder.exists() is False

    def test_create_folder_writes_nothing(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        fs.resolve_file("new/").create_folder()
        assert azure.calls == []


# endregion


# region: metadata


class TestLastModified:
    def test_missing_is_zero(self, fs: AzureFileSystem) -> None:
        assert fs.resolve_file("missing").get_last_modified_time() == 0

    def test_root_is_zero(self, fs: AzureFileSystem) -> None:
        assert fs.get_root().get_last_modified_time() == 0

    def test_epoch_milliseconds(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        azure.put(ACCOUNT, CONTAINER, "f", b"x")
        modified = azure.accounts[ACCOUNT][CONTAINER]["f"].last_modified
        assert fs.resolve_file("f").get_last_modified_time() == int(modified.timestamp() * 1000)

    def test_non_decreasing_across_overwrites(self, fs: AzureFileSystem) -> None:
        obj = fs.resolve_file("f")
        with obj.get_output_stream() as out:
            out.write(b"one")
        first = obj.get_last_modified_time()
        with obj.get_output_stream() as out:
            out.write(b"two")
        assert first > 0
        assert obj.get_last_modified_time() >= first

    def test_set_is_accepted(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        assert fs.resolve_file("f").set_last_modified_time(1_700_000_000_000) is True
        assert azure.calls == []


class TestSignedUrl:
    def _query(self, url: str) -> dict[str, list[str]]:
        return parse_qs(urlsplit(url).query)

    def test_read_only_https(self, fs: AzureFileSystem, azure: FakeAzure) -> None:
        azure.put(ACCOUNT, CONTAINER, "dir/f.txt", b"x")
        url = fs.resolve_file("dir/f.txt").get_signed_url()
        assert url.startswith(f"https://{ACCOUNT}.blob.core.windows.net/{CONTAINER}/dir/f.txt?")
        query = self._query(url)
        assert query["sp"] == ["r"]
        assert query["spr"] == ["https"]
        assert "sig" in query

    def test_validity_window(self, fs: AzureFileSystem) -> None:
        query = self._query(fs.resolve_file("f").get_signed_url())
        start = datetime.strptime(query["st"][0], "%Y-%m-%dT%H:%M:%SZ")
        expiry = datetime.strptime(query["se"][0], "%Y-%m-%dT%H:%M:%SZ")
        assert (expiry - start).total_seconds() == 86400 + 600

    def test_custom_validity(self, fs: AzureFileSystem) -> None:
        query = self._query(fs.resolve_file("f").get_signed_url(validity_seconds=60))
        start = datetime.strptime(query["st"][0], "%Y-%m-%dT%H:%M:%SZ")
        expiry = datetime.strptime(query["se"][0], "%Y-%m-%dT%H:%M:%SZ")
        assert (expiry - start).total_seconds() == 60 + 600

    def test_token_credential_signs_with_delegation_key(
        self, azure: FakeAzure, options: FileSystemOptions, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(_blob, "BlobServiceClient", azure.service_client)
        fs = _token_filesystem(azure, options)
        first = self._query(fs.resolve_file("a").get_signed_url())
        second = self._query(fs.resolve_file("b").get_signed_url())
        for query in (first, second):
            assert query["skoid"] == ["00000000-0000-0000-0000-000000000001"]
            assert query["sp"] == ["r"]
            assert "sig" in query
        assert azure.methods().count("get_user_delegation_key") == 1
        [service] = azure.service_clients
        assert service.account_url == f"https://{ACCOUNT}.blob.core.windows.net"
        assert service.closed

    def test_delegation_key_renewed_past_its_window(
        self, azure: FakeAzure, options: FileSystemOptions, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(_blob, "BlobServiceClient", azure.service_client)
        fs = _token_filesystem(azure, options)
        fs.resolve_file("a").get_signed_url(validity_seconds=60)
        fs.resolve_file("a").get_signed_url(validity_seconds=2 * 3600)
        assert azure.methods().count("get_user_delegation_key") == 2
        assert all(service.closed for service in azure.service_clients)


# endregion
