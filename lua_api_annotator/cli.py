"""Command-line interface for lua-api-annotator."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from lua_api_annotator.analyzer import GenerationOptions, build_catalog, run_generation
from lua_api_annotator.catalog import Catalog
from lua_api_annotator.config import DEFAULT_CONFIG_FILE, load_config
from lua_api_annotator.corpus import CorpusError, read_corpus
from lua_api_annotator.page_loader import ReferencePageError

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Configure logging to stderr."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="lua-api-annotator",
        description="Generate LuaLS annotations for the X4: Foundations Lua UI API",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log progress messages",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # generate subcommand
    generate_parser = subparsers.add_parser(
        "generate",
        help="Run the full pipeline and write annotation files",
    )
    generate_parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path(DEFAULT_CONFIG_FILE),
        help=f"Configuration file (default: ./{DEFAULT_CONFIG_FILE})",
    )
    generate_parser.add_argument(
        "--use-cache",
        action="store_true",
        help="Seed the catalog from saved JSON fragments",
    )
    generate_parser.add_argument(
        "--skip-export",
        action="store_true",
        help="Do not write JSON fragments",
    )
    for kind, label in (
        ("lua", "documented Lua API"),
        ("ffi", "FFI API and types"),
        ("helper", "Helper API"),
        ("undocumented", "undocumented API"),
        ("global-access", "globally exposed functions"),
    ):
        generate_parser.add_argument(
            f"--no-{kind}",
            action="store_true",
            help=f"Skip the {label}",
        )

    # catalog subcommand
    catalog_parser = subparsers.add_parser(
        "catalog",
        help="Build the catalog of a Lua folder and print it as JSON",
    )
    catalog_parser.add_argument("source", type=Path, help="Folder of Lua files")

    # lookup subcommand
    lookup_parser = subparsers.add_parser(
        "lookup",
        help="Resolve one namespace.name path against a Lua folder",
    )
    lookup_parser.add_argument("source", type=Path, help="Folder of Lua files")
    lookup_parser.add_argument("path", help='Function path, e.g. "Helper.round"')

    return parser


def parse_args(args: list[str]) -> argparse.Namespace:
    """Parse command-line arguments."""
    return create_parser().parse_args(args)


def options_from_args(parsed: argparse.Namespace) -> GenerationOptions:
    return GenerationOptions(
        lua=not parsed.no_lua,
        ffi=not parsed.no_ffi,
        helper=not parsed.no_helper,
        undocumented=not parsed.no_undocumented,
        exposed=not parsed.no_global_access,
        use_cache=parsed.use_cache,
        skip_export=parsed.skip_export,
    )


async def run_generate(parsed: argparse.Namespace) -> int:
    """Run the generate command."""
    config = load_config(parsed.config)
    options = options_from_args(parsed)

    try:
        result = await run_generation(config, options)
    except (CorpusError, ReferencePageError) as e:
        logger.error(f"Generation failed during {e.phase}: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(
        f"Generated annotations in {config.annotation_dir} "
        f"({len(result.errors)} errors)",
        file=sys.stderr,
    )
    return 0


def run_catalog(source: Path) -> int:
    """Run the catalog command."""
    try:
        files, _ = read_corpus(source)
    except CorpusError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = build_catalog(files)
    print(result.to_json())
    return 0


def run_lookup(source: Path, path: str) -> int:
    """Run the lookup command."""
    try:
        files, _ = read_corpus(source)
    except CorpusError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    catalog = Catalog()
    build_catalog(files, catalog=catalog)
    record = catalog.resolve(path)
    if record is None:
        print(f"Unknown function: {path}", file=sys.stderr)
        return 1

    print(json.dumps(record.to_dict(), indent=2, sort_keys=True))
    return 0


async def run_cli(args: list[str]) -> int:
    """Run the CLI with the given arguments.

    Args:
        args: Command-line arguments (without program name)

    Returns:
        Exit code (0 for success, non-zero for fatal errors)
    """
    try:
        parsed = parse_args(args)
    except SystemExit as e:
        return e.code if e.code else 1

    setup_logging(parsed.verbose)

    if parsed.command is None:
        create_parser().print_help(sys.stderr)
        return 1

    if parsed.command == "generate":
        return await run_generate(parsed)
    elif parsed.command == "catalog":
        return run_catalog(parsed.source)
    elif parsed.command == "lookup":
        return run_lookup(parsed.source, parsed.path)

    return 1


def main():
    """Entry point for the CLI."""
    exit_code = asyncio.run(run_cli(sys.argv[1:]))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
