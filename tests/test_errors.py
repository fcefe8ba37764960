"""Tests for the error hierarchy and azure-core error mapping."""

from __future__ import annotations

import pytest
from azure.core.exceptions import (
    ClientAuthenticationError,
    HttpResponseError,
    ResourceNotFoundError,
    ServiceRequestError,
)

from azure_vfs._blob import map_azure_errors
from azure_vfs._errors import (
    BackendUnavailable,
    CapabilityNotSupported,
    CopyFailedError,
    FileSystemError,
    MalformedUriError,
    MissingSourceError,
    NotFolderError,
    NotFoundError,
    PermissionDenied,
    SizeLimitExceededError,
    UnsupportedCopySourceError,
)


class TestBaseError:
    def test_default_attributes(self) -> None:
        e = FileSystemError("boom")
        assert e.path is None
        assert str(e) == "boom"

    def test_with_path(self) -> None:
        e = FileSystemError("boom", path="azbs://acct.blob.core.windows.net/data/a")
        assert e.path == "azbs://acct.blob.core.windows.net/data/a"


class TestHierarchy:
    def test_all_errors_derive_from_base(self) -> None:
        for cls in (
            MalformedUriError,
            MissingSourceError,
            NotFoundError,
            NotFolderError,
            PermissionDenied,
            BackendUnavailable,
            SizeLimitExceededError,
            CapabilityNotSupported,
            CopyFailedError,
        ):
            assert issubclass(cls, FileSystemError), cls.__name__

    def test_unsupported_source_is_a_copy_failure(self) -> None:
        assert issubclass(UnsupportedCopySourceError, CopyFailedError)


class TestContext:
    def test_size_limit_carries_size_and_limit(self) -> None:
        e = SizeLimitExceededError("too big", size=10, limit=5)
        assert (e.size, e.limit) == (10, 5)
        assert "size=10" in str(e)
        assert "limit=5" in str(e)

    def test_capability_in_str_and_repr(self) -> None:
        e = CapabilityNotSupported("nope", capability="append_content")
        assert "append_content" in str(e)
        assert "append_content" in repr(e)

    def test_copy_failure_carries_both_ends(self) -> None:
        e = CopyFailedError("failed", source="src-uri", destination="dst-uri")
        assert e.source == "src-uri"
        assert e.destination == "dst-uri"
        assert e.path == "dst-uri"
        assert "source='src-uri'" in str(e)
        assert "destination='dst-uri'" in str(e)

    def test_repr_includes_class_name_and_path(self) -> None:
        r = repr(NotFoundError("gone", path="a/b"))
        assert r.startswith("NotFoundError(")
        assert "a/b" in r

    def test_str_joins_context(self) -> None:
        assert str(NotFoundError("gone", path="a/b")) == "gone | path='a/b'"


class TestMapAzureErrors:
    def test_not_found(self) -> None:
        with pytest.raises(NotFoundError) as exc_info, map_azure_errors("a/b"):
            raise ResourceNotFoundError("missing")
        assert exc_info.value.path == "a/b"
        assert isinstance(exc_info.value.__cause__, ResourceNotFoundError)

    def test_authentication(self) -> None:
        with pytest.raises(PermissionDenied), map_azure_errors("a"):
            raise ClientAuthenticationError("no")

    def test_unreachable(self) -> None:
        with pytest.raises(BackendUnavailable), map_azure_errors("a"):
            raise ServiceRequestError("connection refused")

    def test_other_azure_errors(self) -> None:
        with pytest.raises(FileSystemError) as exc_info, map_azure_errors("a"):
            raise HttpResponseError("server busy")
        assert type(exc_info.value) is FileSystemError

    def test_own_errors_pass_through(self) -> None:
        with pytest.raises(NotFolderError), map_azure_errors("a"):
            raise NotFolderError("x")

    def test_unrelated_errors_pass_through(self) -> None:
        with pytest.raises(KeyError), map_azure_errors("a"):
            raise KeyError("x")
