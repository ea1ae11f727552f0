"""CLI entry point for searchselect."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from searchselect import __version__, logger
from searchselect.async_runner import run_async
from searchselect.exceptions import PackageError
from searchselect.field import SearchableSelect
from searchselect.logging import configure_logging
from searchselect.settings import get_settings
from searchselect.sources.static import StaticSource
from searchselect.typing.models import SelectConfig


def _positive_int(value: str) -> int:
    """Parse a strictly positive integer CLI value.

    Args:
        value (str): CLI value.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive integer.

    Returns:
        int: Parsed value.
    """
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got '{value}'") from exc
    if number < 1:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser.

    Returns:
        argparse.ArgumentParser: The configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="searchselect")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command")

    search_parser = subparsers.add_parser("search", help="Search a static option file")
    search_parser.add_argument("--options", required=True, type=Path, dest="options_path")
    search_parser.add_argument("--query", required=True)
    search_parser.add_argument("--limit", type=_positive_int, default=50)

    validate_parser = subparsers.add_parser("validate", help="Validate a selection against a static option file")
    validate_parser.add_argument("--options", required=True, type=Path, dest="options_path")
    validate_parser.add_argument("--value", action="append", default=[], dest="values")
    validate_parser.add_argument("--multiple", action="store_true")
    validate_parser.add_argument("--min-items", type=int, default=None, dest="min_items")
    validate_parser.add_argument("--max-items", type=int, default=None, dest="max_items")
    validate_parser.add_argument("--no-placeholder", action="store_true", dest="no_placeholder")

    return parser


def load_options(path: Path) -> dict[str, str]:
    """Load a key-to-label mapping from a JSON file.

    Accepts either a JSON object or a list of `{"key", "label"}` objects.

    Args:
        path (Path): JSON file.

    Raises:
        ValueError: If the document has another shape.

    Returns:
        dict[str, str]: Ordered option mapping.
    """
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        return {str(key): str(label) for key, label in payload.items()}
    if isinstance(payload, list):
        return {str(item["key"]): str(item["label"]) for item in payload}
    raise ValueError("Options file must contain a JSON object or array")  # noqa: TRY003


async def _run_search(args: argparse.Namespace) -> list[dict[str, Any]]:
    field = SearchableSelect(
        "cli",
        StaticSource(load_options(args.options_path)),
        SelectConfig(searchable=True, options_limit=args.limit),
    )
    await field.attach()
    candidates = await field.search(args.query)
    field.detach()
    return [entry.model_dump(mode="json") for entry in candidates]


async def _run_validate(args: argparse.Namespace) -> list[dict[str, Any]]:
    field = SearchableSelect(
        "cli",
        StaticSource(load_options(args.options_path)),
        SelectConfig(
            multiple=args.multiple,
            min_items=args.min_items,
            max_items=args.max_items,
            disable_placeholder_selection=args.no_placeholder,
        ),
    )
    await field.attach(args.values if args.multiple else (args.values[0] if args.values else None))
    violations = field.check()
    field.detach()
    return [violation.model_dump(mode="json") for violation in violations]


def main(argv: list[str] | None = None) -> int:
    """Run the CLI.

    Args:
        argv (list[str] | None): Arguments, defaults to `sys.argv[1:]`.

    Returns:
        int: Exit code (0 for success, 1 for error or invalid selection).
    """
    settings = get_settings()
    configure_logging(settings=settings)

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command not in {"search", "validate"}:
        parser.print_help()
        return 0

    try:
        if args.command == "search":
            output = run_async(_run_search(args))
        else:
            output = run_async(_run_validate(args))
    except (PackageError, OSError, ValueError):
        logger.exception("Command failed", extra={"command": args.command})
        return 1
    except KeyboardInterrupt:
        logger.info("Command aborted by user")
        return 130

    sys.stdout.write(json.dumps(output, indent=2) + "\n")
    if args.command == "validate" and output:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
