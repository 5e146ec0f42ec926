"""Generate PNG thumbnails for arbitrary files through the Quick Look CLI."""

from __future__ import annotations

from .config import ThumbnailOptions, ThumbnailSettings
from .exceptions import (
    FolderCreationError,
    GenerationError,
    InvalidSourcePathError,
    RenameError,
    SourceNotFoundError,
    ThumbnailError,
    ToolNotFoundError,
    VerificationError,
)
from .generator import ThumbnailGenerator, create, create_thumbnail

__all__ = [
    "FolderCreationError",
    "GenerationError",
    "InvalidSourcePathError",
    "RenameError",
    "SourceNotFoundError",
    "ThumbnailError",
    "ThumbnailGenerator",
    "ThumbnailOptions",
    "ThumbnailSettings",
    "ToolNotFoundError",
    "VerificationError",
    "create",
    "create_thumbnail",
]
