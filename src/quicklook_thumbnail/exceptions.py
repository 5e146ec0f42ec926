"""Custom exceptions raised by the thumbnail pipeline."""

from __future__ import annotations


class ThumbnailError(Exception):
    """Base error for thumbnail generation failures."""

    stage = "unknown"


class InvalidSourcePathError(ThumbnailError, ValueError):
    """Raised when the source path argument is missing or not a path."""

    stage = "validate"


class ToolNotFoundError(ThumbnailError):
    """Raised when the thumbnailing executable cannot be located."""

    stage = "resolve-tool"


class SourceNotFoundError(ThumbnailError):
    """Raised when the source file cannot be stat'ed."""

    stage = "stat-source"


class FolderCreationError(ThumbnailError):
    """Raised when the destination folder cannot be created."""

    stage = "mkdir"


class GenerationError(ThumbnailError):
    """Raised when the external tool does not report a produced thumbnail."""

    stage = "exec"

    def __init__(
        self,
        message: str,
        *,
        stdout: str = "",
        stderr: str = "",
        returncode: int | None = None,
    ) -> None:
        super().__init__(message)
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode


class RenameError(ThumbnailError):
    """Raised when the generated image cannot be moved to its final name."""

    stage = "rename"


class VerificationError(ThumbnailError):
    """Raised when the renamed image is missing after the rename."""

    stage = "verify"
