"""Operations a filesystem declares it can carry out on its file objects."""

from __future__ import annotations

import dataclasses
import enum
from typing import TYPE_CHECKING

from azure_vfs._errors import CapabilityNotSupported

if TYPE_CHECKING:
    from azure_vfs._name import PathName


class Capability(enum.Enum):
    """File object operations whose support depends on the store."""

    READ_CONTENT = "read_content"
    WRITE_CONTENT = "write_content"
    RANDOM_ACCESS_READ = "random_access_read"
    APPEND_CONTENT = "append_content"
    RENAME = "rename"
    LIST_CHILDREN = "list_children"
    CREATE_FOLDER = "create_folder"
    DELETE = "delete"
    GET_LAST_MODIFIED = "get_last_modified"
    SET_LAST_MODIFIED_FILE = "set_last_modified_file"

    @property
    def label(self) -> str:
        """Human-readable operation name, e.g. ``"append content"``."""
        return self.value.replace("_", " ")


@dataclasses.dataclass(frozen=True)
class CapabilitySet:
    """The capabilities of one filesystem.

    :param capabilities: Supported capabilities.
    """

    capabilities: frozenset[Capability]

    def supports(self, cap: Capability) -> bool:
        return cap in self.capabilities

    def require(self, cap: Capability, name: PathName) -> None:
        """Refuse an operation on the object named ``name`` unless ``cap`` is supported.

        :raises CapabilityNotSupported: Carrying the capability and the object's URI.
        """
        if cap not in self.capabilities:
            raise CapabilityNotSupported(
                f"Cannot {cap.label} on {name.container}: the container does not support it",
                capability=cap.value,
                path=name.uri,
            )
