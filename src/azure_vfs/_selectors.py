"""File selectors used to pick the objects a traversal visits."""

from __future__ import annotations

import abc
import dataclasses
from typing import TYPE_CHECKING

from azure_vfs._types import FileType

if TYPE_CHECKING:
    from azure_vfs._fileobject import FileObject


@dataclasses.dataclass(frozen=True)
class FileSelectInfo:
    """What a selector is shown about one visited object.

    :param base_folder: The object the traversal started from.
    :param file: The object being visited.
    :param depth: Distance from ``base_folder`` (``0`` for the base itself).
    """

    base_folder: FileObject
    file: FileObject
    depth: int


class FileSelector(abc.ABC):
    """Decides which objects of a traversal are selected and descended into."""

    @abc.abstractmethod
    def include_file(self, info: FileSelectInfo) -> bool:
        """Whether the visited object is part of the result."""

    @abc.abstractmethod
    def traverse_descendents(self, info: FileSelectInfo) -> bool:
        """Whether the traversal should descend into the visited folder."""


class FileDepthSelector(FileSelector):
    """Selects objects whose depth lies in ``[min_depth, max_depth]``."""

    def __init__(self, min_depth: int = 0, max_depth: int | None = None) -> None:
        self.min_depth = min_depth
        self.max_depth = max_depth

    def include_file(self, info: FileSelectInfo) -> bool:
        if info.depth < self.min_depth:
            return False
        return self.max_depth is None or info.depth <= self.max_depth

    def traverse_descendents(self, info: FileSelectInfo) -> bool:
        return self.max_depth is None or info.depth < self.max_depth

    def __repr__(self) -> str:
        return f"FileDepthSelector(min_depth={self.min_depth}, max_depth={self.max_depth})"


class FileTypeSelector(FileSelector):
    """Selects every descendant of one type."""

    def __init__(self, file_type: FileType) -> None:
        self.file_type = file_type

    def include_file(self, info: FileSelectInfo) -> bool:
        return info.file.get_type() is self.file_type

    def traverse_descendents(self, info: FileSelectInfo) -> bool:
        return True

    def __repr__(self) -> str:
        return f"FileTypeSelector({self.file_type.name})"


class Selectors:
    """Ready-made selectors."""

    SELECT_SELF = FileDepthSelector(0, 0)
    SELECT_SELF_AND_CHILDREN = FileDepthSelector(0, 1)
    SELECT_CHILDREN = FileDepthSelector(1, 1)
    EXCLUDE_SELF = FileDepthSelector(1)
    SELECT_ALL = FileDepthSelector(0)
    SELECT_FILES = FileTypeSelector(FileType.FILE)
    SELECT_FOLDERS = FileTypeSelector(FileType.FOLDER)
