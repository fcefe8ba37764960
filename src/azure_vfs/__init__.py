"""Virtual filesystem over Azure Blob Storage containers."""

from azure_vfs._capabilities import Capability, CapabilitySet
from azure_vfs._config import AccountConfig, FileSystemOptions, ProviderConfig
from azure_vfs._copy import CopyEngine, compute_block_size
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
from azure_vfs._fileobject import FileObject
from azure_vfs._filesystem import AzureFileSystem
from azure_vfs._manager import FileSystemManager
from azure_vfs._name import PathName
from azure_vfs._object import AttachState, AzureFileObject
from azure_vfs._parser import NameParser
from azure_vfs._selectors import FileDepthSelector, FileSelectInfo, FileSelector, FileTypeSelector, Selectors
from azure_vfs._types import FileType, NameScope

__version__ = "0.1.0"

__all__ = [
    # Core
    "FileSystemManager",
    "AzureFileSystem",
    "AzureFileObject",
    "AttachState",
    "FileObject",
    "CopyEngine",
    "compute_block_size",
    # Names
    "PathName",
    "NameParser",
    "FileType",
    "NameScope",
    # Selectors
    "FileSelector",
    "FileSelectInfo",
    "FileDepthSelector",
    "FileTypeSelector",
    "Selectors",
    # Capabilities
    "Capability",
    "CapabilitySet",
    # Config
    "AccountConfig",
    "FileSystemOptions",
    "ProviderConfig",
    # Errors
    "FileSystemError",
    "MalformedUriError",
    "MissingSourceError",
    "NotFoundError",
    "NotFolderError",
    "PermissionDenied",
    "BackendUnavailable",
    "SizeLimitExceededError",
    "CapabilityNotSupported",
    "CopyFailedError",
    "UnsupportedCopySourceError",
    # Version
    "__version__",
]
