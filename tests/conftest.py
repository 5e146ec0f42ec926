from __future__ import annotations

import stat
import sys
import textwrap
from pathlib import Path

import pytest

from quicklook_thumbnail.config import ThumbnailSettings
from quicklook_thumbnail.generator import ThumbnailGenerator

if sys.platform == "win32":
    collect_ignore_glob = ["test_*.py"]

# Mimics ``qlmanage -t -s SIZE SOURCE -o FOLDER``; behaviour is picked via
# FAKE_QLMANAGE_MODE and the received argv is written to FAKE_QLMANAGE_ARGS.
_FAKE_QLMANAGE = textwrap.dedent(
    """\
    #!/bin/sh
    if [ -n "$FAKE_QLMANAGE_ARGS" ]; then
        printf '%s\\n' "$@" > "$FAKE_QLMANAGE_ARGS"
    fi
    case "${FAKE_QLMANAGE_MODE:-ok}" in
        ok)
            printf 'png' > "$6/$(basename "$4").png"
            echo "Testing Quick Look thumbnails with files:"
            echo "* $4 produced one thumbnail"
            ;;
        no-output)
            echo "* $4 produced one thumbnail"
            ;;
        unsupported)
            echo "Testing Quick Look thumbnails with files:"
            echo "No thumbnail created for $4"
            ;;
        crash)
            echo "qlmanage crashed" >&2
            exit 3
            ;;
        hang)
            exec sleep 30
            ;;
    esac
    """
)


@pytest.fixture
def tool_dir(tmp_path: Path) -> Path:
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    script = bin_dir / "qlmanage"
    script.write_text(_FAKE_QLMANAGE, encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return bin_dir


@pytest.fixture
def tool_args(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    args_file = tmp_path / "qlmanage-args.txt"
    monkeypatch.setenv("FAKE_QLMANAGE_ARGS", str(args_file))
    return args_file


@pytest.fixture
def tool_mode(monkeypatch: pytest.MonkeyPatch):
    def _set(mode: str) -> None:
        monkeypatch.setenv("FAKE_QLMANAGE_MODE", mode)

    return _set


@pytest.fixture
def settings(tool_dir: Path) -> ThumbnailSettings:
    return ThumbnailSettings().model_copy(
        update={"search_path": str(tool_dir), "timeout_seconds": 10.0}
    )


@pytest.fixture
def generator(settings: ThumbnailSettings) -> ThumbnailGenerator:
    return ThumbnailGenerator(settings)


@pytest.fixture
def source_file(tmp_path: Path) -> Path:
    media = tmp_path / "media"
    media.mkdir()
    path = media / "video.mp4"
    path.write_bytes(b"\x00\x00\x00\x18ftypmp42")
    return path
