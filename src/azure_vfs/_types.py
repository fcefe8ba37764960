"""File types and name scopes used throughout azure_vfs."""

from __future__ import annotations

import enum


class FileType(enum.Enum):
    """What a name refers to in the store.

    ``IMAGINARY`` means nothing exists at the name: no blob and no blob
    under it as a prefix.
    """

    FILE = "file"
    FOLDER = "folder"
    FILE_OR_FOLDER = "file_or_folder"
    IMAGINARY = "imaginary"

    @property
    def has_content(self) -> bool:
        """Whether objects of this type carry byte content."""
        return self in (FileType.FILE, FileType.FILE_OR_FOLDER)

    @property
    def has_children(self) -> bool:
        """Whether objects of this type may contain other objects."""
        return self in (FileType.FOLDER, FileType.FILE_OR_FOLDER)


class NameScope(enum.Enum):
    """Constraints applied when resolving a relative name against a base."""

    CHILD = "child"
    DESCENDENT = "descendent"
    DESCENDENT_OR_SELF = "descendent_or_self"
    FILE_SYSTEM = "file_system"
