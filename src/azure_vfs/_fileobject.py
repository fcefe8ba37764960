"""FileObject abstract base class — the contract every file object fulfils."""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, BinaryIO

from azure_vfs._errors import CapabilityNotSupported
from azure_vfs._selectors import FileSelectInfo, Selectors
from azure_vfs._types import FileType, NameScope

if TYPE_CHECKING:
    from types import TracebackType

    from azure_vfs._name import PathName
    from azure_vfs._selectors import FileSelector


class FileObject(abc.ABC):
    """A file or folder addressed by a :class:`PathName`.

    Subclasses supply type inference, children and content access; tree
    traversal with selectors is implemented here once for all of them.

    :param name: The name this object is bound to.
    """

    def __init__(self, name: PathName) -> None:
        self._name = name

    @property
    def name(self) -> PathName:
        return self._name

    @abc.abstractmethod
    def get_type(self) -> FileType:
        """Return what the name currently refers to."""

    def exists(self) -> bool:
        return self.get_type() is not FileType.IMAGINARY

    def is_file(self) -> bool:
        return self.get_type() is FileType.FILE

    def is_folder(self) -> bool:
        return self.get_type() is FileType.FOLDER

    @abc.abstractmethod
    def get_children(self) -> list[FileObject]:
        """Return the immediate children of a folder."""

    @abc.abstractmethod
    def resolve_file(self, relative: str, scope: NameScope = NameScope.FILE_SYSTEM) -> FileObject:
        """Return the object named by ``relative`` resolved against this one."""

    @abc.abstractmethod
    def get_content_size(self) -> int:
        """Size of the content in bytes."""

    @abc.abstractmethod
    def get_input_stream(self) -> BinaryIO:
        """Open the content for reading."""

    def get_output_stream(self, *, append: bool = False) -> BinaryIO:
        """Open the content for writing. Read-only objects raise."""
        raise CapabilityNotSupported(
            f"'{self._name.uri}' cannot be written",
            capability="write_content",
            path=self._name.uri,
        )

    def delete(self) -> bool:
        """Delete this object. Read-only objects raise."""
        raise CapabilityNotSupported(
            f"'{self._name.uri}' cannot be deleted",
            capability="delete",
            path=self._name.uri,
        )

    def account_identity(self) -> str | None:
        """Storage account this object lives in, if it lives in one.

        Two objects reporting the same identity can be copied inside the
        store without routing bytes through this process.
        """
        return None

    def find_files(
        self, selector: FileSelector = Selectors.SELECT_ALL, *, depth_first: bool = False
    ) -> list[FileObject]:
        """Collect the objects of this tree accepted by ``selector``.

        With ``depth_first`` children come before their folder, which is the
        order deletes need; otherwise a folder precedes its children.
        """
        selected: list[FileObject] = []
        if self.exists():
            self._traverse(FileSelectInfo(self, self, 0), selector, depth_first, selected)
        return selected

    def _traverse(
        self, info: FileSelectInfo, selector: FileSelector, depth_first: bool, selected: list[FileObject]
    ) -> None:
        current = info.file
        index = len(selected)
        if current.get_type().has_children and selector.traverse_descendents(info):
            for child in current.get_children():
                self._traverse(FileSelectInfo(info.base_folder, child, info.depth + 1), selector, depth_first, selected)
        if selector.include_file(info):
            if depth_first:
                selected.append(current)
            else:
                selected.insert(index, current)

    def close(self) -> None:  # noqa: B027
        """Release cached state. Default is a no-op."""

    def __enter__(self) -> FileObject:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._name.uri!r})"

    def __str__(self) -> str:
        return self._name.uri
