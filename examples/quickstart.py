"""Quickstart — write, inspect and read a blob through azure-vfs.

Demonstrates:
- Configuring an account with a connection string
- Resolving a URI to a file object
- Writing, reading and listing

Set ``AZURE_STORAGE_CONNECTION_STRING`` (for example to an Azurite
emulator) and ``AZURE_VFS_ROOT`` (``azbs://<account>.blob.core.windows.net/<container>``)
before running.
"""

from __future__ import annotations

import os

from azure_vfs import AccountConfig, FileSystemManager, ProviderConfig

if __name__ == "__main__":
    root = os.environ["AZURE_VFS_ROOT"].rstrip("/")
    account = root.split("://", 1)[1].split(".", 1)[0]
    config = ProviderConfig(
        accounts={account: AccountConfig(connection_string=os.environ["AZURE_STORAGE_CONNECTION_STRING"])},
    )

    with FileSystemManager(config) as manager:
        greeting = manager.resolve_file(f"{root}/examples/hello.txt")

        # Nothing is written until the stream is closed
        with greeting.get_output_stream() as out:
            out.write(b"Hello, world!")
        print(f"Type: {greeting.get_type().name}")
        print(f"Size: {greeting.get_content_size()} bytes")
        print(f"Modified (ms since epoch): {greeting.get_last_modified_time()}")

        with greeting.get_input_stream() as stream:
            print(f"Content: {stream.read()!r}")

        # Folders are implied by the keys below them
        folder = manager.resolve_file(f"{root}/examples/")
        print(f"Children of {folder}: {folder.list_children()}")

        greeting.delete()
        print(f"Exists after delete: {greeting.exists()}")
