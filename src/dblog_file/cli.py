"""
Command-line interface for dblog-file.

Operator counterpart of the settings endpoint::

    dblog-file show
    dblog-file configure --enable --count 500 --types error,warning
    dblog-file path
    dblog-file dump > recent.log

Settings are read with the usual ``DBLOG_FILE_`` environment variables;
``configure`` requires ``DBLOG_FILE_STORE__PATH`` to point at a JSON file.
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

import orjson
from pydantic import ValidationError

from .containers.container import SinkContainer
from .core.errors import DblogFileError
from .core.levels import level_options


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dblog-file",
        description="Inspect and configure the bounded log file.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("show", help="print the current sink settings as JSON")

    configure = sub.add_parser("configure", help="change and save sink settings")
    toggle = configure.add_mutually_exclusive_group()
    toggle.add_argument("--enable", dest="enabled", action="store_true", default=None)
    toggle.add_argument("--disable", dest="enabled", action="store_false", default=None)
    configure.add_argument("--count", type=int, help="maximum lines kept (1-25000)")
    configure.add_argument(
        "--types",
        help="comma-separated levels: " + ",".join(level_options()),
    )

    sub.add_parser("path", help="print the log file location")
    sub.add_parser("dump", help="write the log file to stdout")
    return parser


def _show(container: SinkContainer) -> int:
    current = container.settings_store.load()
    payload = {
        **current.model_dump(mode="json"),
        "path": str(container.file.path),
        "lines": container.file.line_count(),
    }
    sys.stdout.write(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode() + "\n")
    return 0


def _configure(container: SinkContainer, args: argparse.Namespace) -> int:
    current = container.settings_store.load()
    changes: dict[str, object] = {}
    if args.enabled is not None:
        changes["enabled"] = args.enabled
    if args.count is not None:
        changes["count"] = args.count
    if args.types is not None:
        changes["types"] = args.types
    updated = current.model_validate({**current.model_dump(), **changes})
    container.settings_store.save(updated)
    container.file.trim(updated.count)
    return _show(container)


def _dump(container: SinkContainer) -> int:
    sys.stdout.buffer.write(container.file.read_bytes())
    sys.stdout.flush()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point; returns the process exit code."""
    args = _build_parser().parse_args(argv)
    try:
        container = SinkContainer()
        if args.command == "show":
            return _show(container)
        if args.command == "configure":
            return _configure(container, args)
        if args.command == "path":
            sys.stdout.write(f"{container.file.path}\n")
            return 0
        return _dump(container)
    except ValidationError as e:
        sys.stderr.write(f"Error: invalid settings: {e}\n")
        return 2
    except DblogFileError as e:
        sys.stderr.write(f"Error: {e.message}\n")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
