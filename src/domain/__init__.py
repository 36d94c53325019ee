"""Domain layer: errors and schemas."""

from .errors import (
    FileConflictError,
    InvalidPathError,
    NoUserError,
    NotFoundError,
    NotPermittedError,
    StorageError,
    StorageUnavailableError,
    TemplateCreationError,
    TemplateError,
)
from .schemas import (
    MimetypeListing,
    NodeType,
    ProbeResult,
    TemplateFileInfo,
    TemplateGroup,
)

__all__ = [
    # errors
    "TemplateError",
    "FileConflictError",
    "TemplateCreationError",
    "StorageError",
    "NotFoundError",
    "NotPermittedError",
    "NoUserError",
    "InvalidPathError",
    "StorageUnavailableError",
    # schemas
    "TemplateGroup",
    "TemplateFileInfo",
    "MimetypeListing",
    "NodeType",
    "ProbeResult",
]
