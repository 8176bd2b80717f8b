"""Command-line entry point for the web thumbnailer."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import Any, Dict, Iterable, Sequence, Union

from .cache import CacheManager
from .config import ThumbnailConfig
from .facade import WebThumbnailer
from .models import CacheType, DownloadMode, ServerContext
from .options import (
    CROP,
    DEBUG,
    DOWNLOAD_MAX_SIZE,
    DOWNLOAD_MODE,
    DOWNLOAD_TIMEOUT,
    MAX_HEIGHT,
    MAX_WIDTH,
    NOCACHE,
    VERBOSE,
)

logger = logging.getLogger("web_thumbnailer.cli")


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return argv
    first = argv[0]
    if first in commands or first.startswith("-"):
        return argv
    return ("get", *argv)


def _size(value: str) -> Union[int, str]:
    """Accept either a pixel count or a symbolic size name."""
    return int(value) if value.isdigit() else value.lower()


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=None,
        help="Directory where downloaded thumbnails are stored (default: $WEB_THUMBNAILER_CACHE_DIR or ./cache)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def _add_get_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("urls", nargs="+", help="One or more URLs to find thumbnails for")
    parser.add_argument(
        "--mode",
        choices=[mode.value.lower() for mode in DownloadMode],
        default=None,
        help="download: resize and cache locally; hotlink: link the original when allowed; "
        "hotlink_strict: only ever link the original",
    )
    parser.add_argument(
        "--width",
        type=_size,
        default=None,
        help="Maximum width in pixels, or small/medium/large",
    )
    parser.add_argument(
        "--height",
        type=_size,
        default=None,
        help="Maximum height in pixels, or small/medium/large",
    )
    parser.add_argument(
        "--crop",
        action="store_true",
        help="Crop to exactly WIDTHxHEIGHT instead of fitting inside it",
    )
    parser.add_argument(
        "--nocache",
        action="store_true",
        help="Ignore cached thumbnails and download again",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=None,
        help="Network timeout in seconds",
    )
    parser.add_argument(
        "--max-size",
        type=int,
        default=None,
        help="Maximum number of bytes to download for one image",
    )
    parser.add_argument(
        "--document-root",
        default=None,
        help="Strip this prefix from cached paths when printing them (default: $DOCUMENT_ROOT)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Raise errors instead of reporting missing thumbnails",
    )
    _add_common_arguments(parser)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Find a representative thumbnail for web pages, optionally downloading and resizing it.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    get_parser = subparsers.add_parser("get", help="Resolve thumbnails for URLs")
    _add_get_arguments(get_parser)

    purge_parser = subparsers.add_parser("purge", help="Delete every cached thumbnail")
    _add_common_arguments(purge_parser)

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


def _build_config(args: argparse.Namespace) -> ThumbnailConfig:
    config = ThumbnailConfig.from_env()
    if args.cache_dir is not None:
        config.cache_dir = args.cache_dir.expanduser().resolve()
    return config


def _build_options(args: argparse.Namespace) -> Dict[str, Any]:
    options: Dict[str, Any] = {
        CROP: args.crop,
        NOCACHE: args.nocache,
        DEBUG: args.debug,
        VERBOSE: True,
    }
    if args.mode:
        options[DOWNLOAD_MODE] = DownloadMode(args.mode.upper())
    if args.width is not None:
        options[MAX_WIDTH] = args.width
    if args.height is not None:
        options[MAX_HEIGHT] = args.height
    if args.timeout is not None:
        options[DOWNLOAD_TIMEOUT] = args.timeout
    if args.max_size is not None:
        options[DOWNLOAD_MAX_SIZE] = args.max_size
    return options


def _run_get(args: argparse.Namespace) -> int:
    config = _build_config(args)
    server = ServerContext.from_environ(os.environ)
    if args.document_root is not None:
        server = ServerContext(document_root=args.document_root)

    thumbnailer = WebThumbnailer(config=config, server=server)
    options = _build_options(args)

    overall_start = time.perf_counter()
    failures = 0
    for url in args.urls:
        result = thumbnailer.thumbnail(url, options)
        if result is False:
            failures += 1
            sys.stdout.write(f"{url} -> (none)\n")
        else:
            sys.stdout.write(f"{url} -> {result}\n")
    sys.stdout.flush()
    total_elapsed = time.perf_counter() - overall_start

    logger.info(
        "Finished in %.2fs (%d/%d succeeded, %d failed)",
        total_elapsed,
        len(args.urls) - failures,
        len(args.urls),
        failures,
    )
    return 1 if failures else 0


def _run_purge(args: argparse.Namespace) -> int:
    config = _build_config(args)
    removed = CacheManager(config).purge(CacheType.THUMB)
    logger.info("Removed %d cached thumbnail(s) from %s", removed, config.cache_dir)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    if args.command == "purge":
        return _run_purge(args)
    return _run_get(args)


if __name__ == "__main__":
    sys.exit(main())
