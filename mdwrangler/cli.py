"""
Serve a directory of markdown files for browsing and editing.

Usage:
    markdown-wrangler [--debug] [--host HOST] [--port PORT] [DIR]

Environment:
    WRANGLER_TARGET_DIR, WRANGLER_HOST, WRANGLER_PORT, WRANGLER_DEBUG
    supply defaults for the matching options.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import uvicorn

from mdwrangler.config import Settings
from mdwrangler.main import configure_logging, create_app

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="markdown-wrangler",
        description="A web interface to manage websites stored as markdown files",
    )
    parser.add_argument("--debug", action="store_true", default=None, help="Enable debug logging")
    parser.add_argument("--host", help="Address to bind (default 127.0.0.1)")
    parser.add_argument("--port", type=int, help="Port to listen on (default 5420)")
    parser.add_argument(
        "target_dir",
        nargs="?",
        type=Path,
        metavar="DIR",
        help="Target directory to watch for markdown files (default .)",
    )
    return parser


def validate_target_dir(target_dir: Path) -> str | None:
    if not target_dir.exists():
        return f"Target directory '{target_dir}' does not exist"
    if not target_dir.is_dir():
        return f"Target path '{target_dir}' is not a directory"
    return None


def settings_from_args(args: argparse.Namespace) -> Settings:
    overrides = {
        key: value
        for key, value in vars(args).items()
        if value is not None
    }
    return Settings(**overrides)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings_from_args(args)

    error = validate_target_dir(settings.target_dir)
    if error:
        print(f"Error: {error}", file=sys.stderr)
        return 1

    configure_logging(settings.debug)
    logger.info("Starting markdown-wrangler")

    app = create_app(settings)
    logger.info(f"Web server listening on http://{settings.host}:{settings.port}, press Ctrl+C to stop")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level="debug" if settings.debug else "info")
    return 0


if __name__ == "__main__":
    sys.exit(main())
