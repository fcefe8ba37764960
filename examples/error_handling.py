"""Error handling — catching MalformedUriError, NotFolderError, CopyFailedError, etc.

Demonstrates the normalized error hierarchy and its structured attributes.
Uses the same environment variables as ``quickstart.py``.
"""

from __future__ import annotations

import os

from azure_vfs import (
    AccountConfig,
    CapabilityNotSupported,
    FileSystemError,
    FileSystemManager,
    MalformedUriError,
    MissingSourceError,
    NotFolderError,
    NotFoundError,
    ProviderConfig,
)

if __name__ == "__main__":
    root = os.environ["AZURE_VFS_ROOT"].rstrip("/")
    account = root.split("://", 1)[1].split(".", 1)[0]
    config = ProviderConfig(
        accounts={account: AccountConfig(connection_string=os.environ["AZURE_STORAGE_CONNECTION_STRING"])},
    )

    with FileSystemManager(config) as manager:
        # --- MalformedUriError ---
        try:
            manager.resolve_file("s3://bucket/key")
        except MalformedUriError as exc:
            print(f"MalformedUriError: {exc}")

        # --- NotFoundError ---
        missing = manager.resolve_file(f"{root}/does/not/exist.txt")
        try:
            missing.get_content_size()
        except NotFoundError as exc:
            print(f"NotFoundError: path={exc.path}")

        # --- NotFolderError ---
        note = manager.resolve_file(f"{root}/errors/note.txt")
        with note.get_output_stream() as out:
            out.write(b"not a folder")
        try:
            note.get_children()
        except NotFolderError as exc:
            print(f"NotFolderError: {exc}")

        # --- CapabilityNotSupported ---
        try:
            note.get_output_stream(append=True)
        except CapabilityNotSupported as exc:
            print(f"CapabilityNotSupported: capability={exc.capability}")

        # --- MissingSourceError ---
        try:
            manager.resolve_file(f"{root}/errors/copy/").copy_from(missing)
        except MissingSourceError as exc:
            print(f"MissingSourceError: {exc}")

        # --- Catch-all ---
        try:
            note.delete()
        except FileSystemError as exc:
            print(f"Unexpected: {exc!r}")
