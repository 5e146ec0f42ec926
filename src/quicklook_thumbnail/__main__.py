"""Command line entry point: ``python -m quicklook_thumbnail SOURCE``."""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence

from .config import ThumbnailOptions, ThumbnailSettings
from .exceptions import InvalidSourcePathError, ThumbnailError
from .generator import ThumbnailGenerator
from .logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quicklook-thumbnail",
        description="Render a PNG thumbnail for a file using qlmanage.",
    )
    parser.add_argument("source", help="file to render")
    parser.add_argument(
        "--folder",
        default=None,
        help="destination directory (default: the source file's directory)",
    )
    parser.add_argument(
        "--size", type=int, default=None, help="maximum pixel dimension"
    )
    parser.add_argument("--log-level", default=None, help="e.g. DEBUG, INFO")
    parser.add_argument("--log-format", choices=("json", "console"), default=None)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = ThumbnailSettings()
    configure_logging(
        args.log_level or settings.log_level,
        args.log_format or settings.log_format,
    )

    generator = ThumbnailGenerator(settings)
    options = ThumbnailOptions(folder=args.folder, size=args.size)
    try:
        path = asyncio.run(generator.create(args.source, options))
    except InvalidSourcePathError as exc:
        parser.error(str(exc))
    except ThumbnailError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    print(path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
