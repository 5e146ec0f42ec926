from __future__ import annotations

import asyncio
import contextlib
import inspect
import os
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

from structlog.stdlib import BoundLogger

from .config import (
    THUMBNAIL_EXTENSION,
    PathInput,
    ThumbnailOptions,
    ThumbnailSettings,
)
from .exceptions import (
    FolderCreationError,
    GenerationError,
    InvalidSourcePathError,
    RenameError,
    SourceNotFoundError,
    ThumbnailError,
    VerificationError,
)
from .logging import get_logger
from .tool import ToolResolver, resolve_tool, which

OptionsInput = Union[ThumbnailOptions, Mapping[str, Any], None]
ThumbnailCallback = Callable[
    [Union[ThumbnailError, None], Union[Path, None]], Union[Awaitable[None], None]
]


@dataclass(slots=True)
class ResolvedRequest:
    source: Path
    folder: Path
    size: int

    @property
    def tool_output(self) -> Path:
        """Where the tool writes: the full source name plus the extension."""
        return self.folder / f"{self.source.name}{THUMBNAIL_EXTENSION}"

    @property
    def target(self) -> Path:
        stem = os.path.splitext(self.source.name)[0]
        return self.folder / f"{stem}{THUMBNAIL_EXTENSION}"


def validate_source_path(source_path: Any) -> str:
    """Return *source_path* as a string or raise :class:`InvalidSourcePathError`."""

    if isinstance(source_path, os.PathLike):
        source_path = os.fspath(source_path)
    if not isinstance(source_path, str) or not source_path:
        raise InvalidSourcePathError("Source path requires a non-empty string.")
    return source_path


def resolve_request(
    source_path: str, options: ThumbnailOptions, default_size: int
) -> ResolvedRequest:
    source = Path(os.path.abspath(source_path))
    folder_override = options.valid_folder()
    folder = (
        Path(os.path.abspath(folder_override))
        if folder_override is not None
        else source.parent
    )
    size = options.valid_size() or default_size
    return ResolvedRequest(source=source, folder=folder, size=size)


class ThumbnailGenerator:
    """Produce ``<folder>/<name>.png`` for a source file using the Quick Look CLI.

    Each call runs the stages stat -> mkdir -> exec -> rename -> stat in
    order and stops at the first failure, raising the matching
    :class:`~quicklook_thumbnail.exceptions.ThumbnailError` subclass.
    """

    def __init__(
        self,
        settings: ThumbnailSettings | None = None,
        *,
        resolver: ToolResolver = which,
    ) -> None:
        self._settings = settings or ThumbnailSettings()
        self._resolver = resolver
        self._log = get_logger(__name__)

    @property
    def settings(self) -> ThumbnailSettings:
        return self._settings

    async def create(
        self, source_path: PathInput, options: OptionsInput = None
    ) -> Path:
        source = validate_source_path(source_path)
        request = resolve_request(
            source, ThumbnailOptions.coerce(options), self._settings.default_size
        )
        return await self.run(request)

    async def run(self, request: ResolvedRequest) -> Path:
        log = self._log.bind(
            source=str(request.source), folder=str(request.folder), size=request.size
        )
        try:
            command = await asyncio.to_thread(
                resolve_tool,
                self._settings.executable,
                self._settings.search_path,
                resolver=self._resolver,
            )
            log.debug("thumbnail-tool-resolved", command=command)

            await self._stat_source(request)
            await self._ensure_folder(request)
            await self._generate(command, request)
            log.debug("thumbnail-tool-finished")
            await self._rename(request, log)
            await self._verify(request)
        except ThumbnailError as exc:
            log.warning("thumbnail-stage-failed", stage=exc.stage, error=str(exc))
            raise

        log.info("thumbnail-generated", path=str(request.target))
        return request.target

    async def _stat_source(self, request: ResolvedRequest) -> None:
        try:
            await asyncio.to_thread(os.stat, request.source)
        except (OSError, ValueError) as exc:
            raise SourceNotFoundError(
                f"Source file not found: {request.source}"
            ) from exc

    async def _ensure_folder(self, request: ResolvedRequest) -> None:
        try:
            await asyncio.to_thread(os.mkdir, request.folder)
        except FileExistsError:
            return
        except (OSError, ValueError) as exc:
            reason = getattr(exc, "strerror", None) or exc
            raise FolderCreationError(
                f"Unable to create folder {request.folder}: {reason}"
            ) from exc

    async def _generate(self, command: str, request: ResolvedRequest) -> None:
        args = [
            "-t",
            "-s",
            str(request.size),
            str(request.source),
            "-o",
            str(request.folder),
        ]
        try:
            process = await asyncio.create_subprocess_exec(
                command,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise GenerationError(f"Error: unable to run {command}: {exc}") from exc

        timeout = self._settings.timeout_seconds
        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(
                process.communicate(), timeout=timeout
            )
        except asyncio.TimeoutError as exc:
            await _terminate(process)
            raise GenerationError(
                f"Error: {command} timed out after {timeout}s",
                returncode=process.returncode,
            ) from exc
        except asyncio.CancelledError:
            await _terminate(process)
            raise

        stdout = stdout_bytes.decode("utf-8", errors="replace")
        stderr = stderr_bytes.decode("utf-8", errors="replace")
        # qlmanage reports most failures on stdout with a zero exit status
        if self._settings.success_marker in stdout:
            return

        raise GenerationError(
            _failure_message(command, stdout, stderr, process.returncode),
            stdout=stdout,
            stderr=stderr,
            returncode=process.returncode,
        )

    async def _rename(self, request: ResolvedRequest, log: BoundLogger) -> None:
        try:
            await asyncio.to_thread(os.replace, request.tool_output, request.target)
        except (OSError, ValueError) as exc:
            if self._settings.cleanup_on_failure:
                await self._discard(request.tool_output, log)
            reason = getattr(exc, "strerror", None) or exc
            raise RenameError(
                f"Unable to rename {request.tool_output} to {request.target}: "
                f"{reason}"
            ) from exc

    async def _discard(self, path: Path, log: BoundLogger) -> None:
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            return
        except OSError as exc:
            log.warning("thumbnail-cleanup-failed", path=str(path), error=str(exc))
            return
        log.debug("thumbnail-orphan-removed", path=str(path))

    async def _verify(self, request: ResolvedRequest) -> None:
        try:
            await asyncio.to_thread(os.stat, request.target)
        except (OSError, ValueError) as exc:
            raise VerificationError(
                f"Thumbnail missing after rename: {request.target}"
            ) from exc


async def _terminate(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        await process.wait()


def _failure_message(
    command: str, stdout: str, stderr: str, returncode: int | None
) -> str:
    stdout = stdout.strip()
    stderr = stderr.strip()
    if stdout:
        return f"Error: {stdout}"
    if returncode:
        detail = f"{command} exited with status {returncode}"
        if stderr:
            detail = f"{detail}: {stderr}"
        return f"Error: {detail}"
    if stderr:
        return f"Error: {stderr}"
    return f"Error: {command} did not produce a thumbnail"


async def create(
    source_path: PathInput,
    options: OptionsInput = None,
    *,
    settings: ThumbnailSettings | None = None,
) -> Path:
    """Generate one thumbnail with a default :class:`ThumbnailGenerator`."""

    return await ThumbnailGenerator(settings).create(source_path, options)


async def create_thumbnail(
    source_path: PathInput,
    callback: ThumbnailCallback,
    options: OptionsInput = None,
    *,
    generator: ThumbnailGenerator | None = None,
) -> None:
    """Run :meth:`ThumbnailGenerator.create` and report through *callback*.

    The callback is called exactly once, either as ``callback(None, path)``
    or ``callback(error, None)``. Invalid arguments are raised to the caller
    instead.

    Raises:
        InvalidSourcePathError: If *source_path* is empty or not a path.
        TypeError: If *callback* is not callable or *options* has the wrong type.
    """

    source = validate_source_path(source_path)
    if not callable(callback):
        raise TypeError("callback must be callable")
    generator = generator or ThumbnailGenerator()
    request = resolve_request(
        source, ThumbnailOptions.coerce(options), generator.settings.default_size
    )

    try:
        path = await generator.run(request)
    except ThumbnailError as exc:
        outcome = callback(exc, None)
    else:
        outcome = callback(None, path)
    if inspect.isawaitable(outcome):
        await outcome
