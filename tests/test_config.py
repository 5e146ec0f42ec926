from __future__ import annotations

from pathlib import Path

import pytest

from quicklook_thumbnail.config import ThumbnailOptions, ThumbnailSettings


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    for name in (
        "QLTHUMB_EXECUTABLE",
        "QLTHUMB_DEFAULT_SIZE",
        "QLTHUMB_TIMEOUT_SECONDS",
        "QLTHUMB_SUCCESS_MARKER",
        "QLTHUMB_CLEANUP_ON_FAILURE",
        "QLTHUMB_LOG_LEVEL",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = ThumbnailSettings()

    assert settings.executable == "qlmanage"
    assert settings.default_size == 512
    assert settings.success_marker == "produced one thumbnail"
    assert settings.timeout_seconds == 60.0
    assert settings.cleanup_on_failure is True
    assert settings.log_level == "INFO"


def test_settings_read_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("QLTHUMB_EXECUTABLE", "/opt/bin/qlmanage")
    monkeypatch.setenv("QLTHUMB_DEFAULT_SIZE", "128")
    monkeypatch.setenv("QLTHUMB_CLEANUP_ON_FAILURE", "false")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    settings = ThumbnailSettings()

    assert settings.executable == "/opt/bin/qlmanage"
    assert settings.default_size == 128
    assert settings.cleanup_on_failure is False
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "size,expected",
    [
        (256, 256),
        (300.9, 300),
        (0, None),
        (-5, None),
        (True, None),
        ("512", None),
        (None, None),
        (float("nan"), None),
    ],
)
def test_valid_size(size: object, expected: int | None) -> None:
    assert ThumbnailOptions(size=size).valid_size() == expected  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "folder,expected",
    [
        ("/tmp/thumbs", "/tmp/thumbs"),
        (Path("/tmp/thumbs"), "/tmp/thumbs"),
        ("", None),
        (42, None),
        (None, None),
    ],
)
def test_valid_folder(folder: object, expected: str | None) -> None:
    assert ThumbnailOptions(folder=folder).valid_folder() == expected  # type: ignore[arg-type]


def test_coerce_accepts_mappings_and_ignores_unknown_keys() -> None:
    options = ThumbnailOptions.coerce({"folder": "/tmp/x", "size": 64, "other": 1})

    assert options == ThumbnailOptions(folder="/tmp/x", size=64)
    assert ThumbnailOptions.coerce(None) == ThumbnailOptions()


def test_coerce_rejects_other_types() -> None:
    with pytest.raises(TypeError):
        ThumbnailOptions.coerce(["/tmp/x"])  # type: ignore[arg-type]
