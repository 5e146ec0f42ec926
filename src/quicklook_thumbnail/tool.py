"""Locate the external thumbnailing executable."""

from __future__ import annotations

import os
import shutil
from collections.abc import Callable
from typing import Optional

from .exceptions import ToolNotFoundError

ToolResolver = Callable[[str, Optional[str]], Optional[str]]


def which(executable: str, search_path: str | None = None) -> str | None:
    """Search-path lookup returning the absolute path of *executable*."""

    found = shutil.which(executable, path=search_path)
    if found is None:
        return None
    return os.path.abspath(found)


def resolve_tool(
    executable: str,
    search_path: str | None = None,
    *,
    resolver: ToolResolver = which,
) -> str:
    """Return the tool location or raise :class:`ToolNotFoundError`."""

    command = resolver(executable, search_path)
    if not command:
        where = search_path if search_path is not None else "PATH"
        raise ToolNotFoundError(f"Unable to locate '{executable}' on {where}")
    return command
