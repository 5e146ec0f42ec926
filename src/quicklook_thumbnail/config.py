from __future__ import annotations

import math
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal, Union

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PathInput = Union[str, os.PathLike]

DEFAULT_EXECUTABLE = "qlmanage"
DEFAULT_SIZE = 512
SUCCESS_MARKER = "produced one thumbnail"
THUMBNAIL_EXTENSION = ".png"


class ThumbnailSettings(BaseSettings):
    """Configuration container for the thumbnail generator."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    executable: str = Field(
        DEFAULT_EXECUTABLE,
        validation_alias=AliasChoices("QLTHUMB_EXECUTABLE"),
    )
    search_path: str | None = Field(
        None,
        validation_alias=AliasChoices("QLTHUMB_SEARCH_PATH"),
    )
    default_size: int = Field(
        DEFAULT_SIZE,
        gt=0,
        validation_alias=AliasChoices("QLTHUMB_DEFAULT_SIZE"),
    )
    success_marker: str = Field(
        SUCCESS_MARKER,
        min_length=1,
        validation_alias=AliasChoices("QLTHUMB_SUCCESS_MARKER"),
    )
    timeout_seconds: float | None = Field(
        60.0,
        validation_alias=AliasChoices("QLTHUMB_TIMEOUT_SECONDS"),
    )
    cleanup_on_failure: bool = Field(
        True,
        validation_alias=AliasChoices("QLTHUMB_CLEANUP_ON_FAILURE"),
    )
    log_level: str = Field(
        "INFO", validation_alias=AliasChoices("QLTHUMB_LOG_LEVEL", "LOG_LEVEL")
    )
    log_format: Literal["json", "console"] = Field(
        "json", validation_alias=AliasChoices("QLTHUMB_LOG_FORMAT")
    )


@dataclass(slots=True)
class ThumbnailOptions:
    """Per-request overrides; ``None`` keeps the default."""

    folder: PathInput | None = field(default=None)
    size: int | float | None = field(default=None)

    @classmethod
    def coerce(
        cls, options: ThumbnailOptions | Mapping[str, Any] | None
    ) -> ThumbnailOptions:
        if options is None:
            return cls()
        if isinstance(options, ThumbnailOptions):
            return options
        if isinstance(options, Mapping):
            return cls(folder=options.get("folder"), size=options.get("size"))
        raise TypeError(
            "options must be ThumbnailOptions or a mapping, "
            f"not {type(options).__name__}"
        )

    def valid_folder(self) -> str | None:
        """Return the folder override if it is usable, otherwise ``None``."""

        folder = self.folder
        if isinstance(folder, os.PathLike):
            folder = os.fspath(folder)
        if isinstance(folder, str) and folder:
            return folder
        return None

    def valid_size(self) -> int | None:
        """Return the size override if it is a positive number, otherwise ``None``.

        Fractional sizes are truncated since the tool only accepts whole pixels.
        """

        size = self.size
        if isinstance(size, bool) or not isinstance(size, (int, float)):
            return None
        if isinstance(size, float) and not math.isfinite(size):
            return None
        size = int(size)
        if size <= 0:
            return None
        return size
