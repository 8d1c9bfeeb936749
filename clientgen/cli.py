# File: clientgen/cli.py
"""
clientgen - Command-Line Interface
===================================

CLI built on the standard-library ``argparse`` module.

Usage examples::

    # Basic generation
    python -m clientgen --schema schema.json --output ./generated

    # Verbose output, custom client name
    python -m clientgen -s schema.yaml -o ./out -v --client-name ShopClient

    # Validate only (no file output)
    python -m clientgen -s schema.yaml --validate-only

    # Render without writing and print the declarations document
    python -m clientgen -s schema.yaml --dry-run --print

Exit codes:
    0: success
    1: validation error
    2: generation error
    3: export error
    4: input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Sequence

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("clientgen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root clientgen logger based on verbosity level.

    Args:
        verbosity: 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    datefmt: str = "%H:%M:%S"
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root_logger: logging.Logger = logging.getLogger("clientgen")
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplication
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from clientgen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="clientgen",
        description=(
            "clientgen: typed data-access client generator.\n\n"
            "Turns a schema document (JSON/YAML) into a TypeScript "
            "declaration file and a data-only JavaScript module."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s -s schema.json -o ./generated\n"
            "  %(prog)s -s schema.yaml --validate-only\n"
            "  %(prog)s -s schema.yaml --dry-run --print\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"clientgen v{__version__}",
    )

    # --- Required arguments ---
    parser.add_argument(
        "-s", "--schema",
        type=str,
        required=True,
        metavar="PATH",
        help="Path to the schema document (JSON or YAML).",
    )

    # --- Output ---
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        metavar="DIR",
        help=(
            "Output directory for the generated client. "
            "Required unless --validate-only or --dry-run is set."
        ),
    )

    # --- Modes ---
    mode_group = parser.add_argument_group("operation modes")
    mode_group.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Only validate the schema without generating code.",
    )
    mode_group.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Render both documents but don't write anything to disk.",
    )
    mode_group.add_argument(
        "--print",
        dest="print_ts",
        action="store_true",
        default=False,
        help="Print the rendered declaration document to stdout.",
    )

    # --- Config overrides ---
    config_group = parser.add_argument_group("configuration overrides")
    config_group.add_argument(
        "--client-name",
        type=str,
        default=None,
        metavar="NAME",
        help="Override the root client class name.",
    )
    config_group.add_argument(
        "--runtime-path",
        type=str,
        default=None,
        metavar="PATH",
        help="Override the import path of the client runtime.",
    )
    config_group.add_argument(
        "--client-version",
        type=str,
        default=None,
        metavar="VER",
        help="Override the stamped client version.",
    )
    config_group.add_argument(
        "--engine-version",
        type=str,
        default=None,
        metavar="VER",
        help="Override the stamped engine version.",
    )
    config_group.add_argument(
        "--no-js",
        action="store_true",
        default=False,
        help="Skip the JavaScript document.",
    )

    # --- Behaviour flags ---
    behaviour_group = parser.add_argument_group("behaviour flags")
    behaviour_group.add_argument(
        "--fail-on-warnings",
        action="store_true",
        default=False,
        help="Treat validation warnings as errors.",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all output except errors.",
    )

    return parser


# ---------------------------------------------------------------------------
# Config override builder
# ---------------------------------------------------------------------------


def _build_config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Build a config override dictionary from CLI arguments."""
    overrides: Dict[str, Any] = {}

    if args.client_name is not None:
        overrides["client_name"] = args.client_name

    if args.runtime_path is not None:
        overrides["runtime_path"] = args.runtime_path

    if args.client_version is not None:
        overrides["client_version"] = args.client_version

    if args.engine_version is not None:
        overrides["engine_version"] = args.engine_version

    if args.no_js:
        overrides["emit_js"] = False

    return overrides


# ---------------------------------------------------------------------------
# Validate-only mode
# ---------------------------------------------------------------------------


def _run_validate_only(schema_path: Path, overrides: Dict[str, Any]) -> int:
    """
    Run validation only (no rendering).

    Returns the appropriate exit code.
    """
    from clientgen.generator import load_schema_file, parse_raw_document
    from clientgen.utils import Timer
    from clientgen.validators import validate_full

    logger.info("Running validation-only mode for: %s", schema_path)

    try:
        raw_data = load_schema_file(schema_path)
        document, config = parse_raw_document(raw_data, overrides or None)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Failed to load schema: %s", exc)
        return EXIT_INPUT_ERROR

    with Timer("validation") as t:
        result = validate_full(document, config)

    print(f"\n{'=' * 50}")
    print("  Schema Validation Report")
    print(f"{'=' * 50}")
    print(f"  File:      {schema_path.name}")
    print(f"  Entities:  {len(document.datamodel.models)}")
    print(f"  Time:      {t.elapsed:.3f}s")
    print(f"  Valid:     {'Yes' if result.is_valid else 'No'}")

    if result.errors:
        print(f"\n  Errors ({len(result.errors)}):")
        for err in result.errors:
            print(f"    ✗ {err}")

    if result.warnings:
        print(f"\n  Warnings ({len(result.warnings)}):")
        for warn in result.warnings:
            print(f"    ⚠ {warn}")

    if result.is_valid and not result.warnings:
        print("\n  ✅ All validations passed!")

    print(f"{'=' * 50}\n")

    return EXIT_SUCCESS if result.is_valid else EXIT_VALIDATION_ERROR


# ---------------------------------------------------------------------------
# Full generation mode
# ---------------------------------------------------------------------------


def _run_generation(
    schema_path: Path,
    output_dir: Optional[Path],
    args: argparse.Namespace,
) -> int:
    """
    Run the full generation pipeline.

    Returns the appropriate exit code.
    """
    from clientgen.generator import ClientGenerator, GenerationReport

    config_overrides: Dict[str, Any] = _build_config_overrides(args)
    generator: ClientGenerator = ClientGenerator(fail_on_warnings=args.fail_on_warnings)

    if output_dir is None:
        logger.info("Dry-run mode: files will not be written to disk.")

    report: GenerationReport = generator.generate_from_file(
        schema_path=schema_path,
        output_dir=output_dir,
        config_overrides=config_overrides or None,
    )

    if args.print_ts and report.result is not None:
        ts_file = report.result.files[0]
        sys.stdout.write(ts_file.content)
    else:
        print(report.summary())

    if not report.success:
        if report.input_errors:
            return EXIT_INPUT_ERROR
        if report.validation_errors or report.validation_warnings:
            return EXIT_VALIDATION_ERROR
        if report.generation_errors:
            return EXIT_GENERATION_ERROR
        if report.export_errors:
            return EXIT_EXPORT_ERROR
        return EXIT_GENERATION_ERROR

    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.quiet:
        verbosity: int = -1
    else:
        verbosity = args.verbose

    _setup_logging(verbosity)
    if args.quiet:
        logging.getLogger("clientgen").setLevel(logging.ERROR)

    schema_path: Path = Path(args.schema).resolve()

    if not schema_path.exists():
        logger.error("Schema file not found: %s", schema_path)
        sys.exit(EXIT_INPUT_ERROR)

    if not schema_path.is_file():
        logger.error("Schema path is not a file: %s", schema_path)
        sys.exit(EXIT_INPUT_ERROR)

    if args.validate_only:
        sys.exit(_run_validate_only(schema_path, _build_config_overrides(args)))

    output_dir: Optional[Path] = None
    if not args.dry_run:
        if args.output is None:
            logger.error(
                "Output directory is required for generation. "
                "Use -o/--output, --dry-run or --validate-only."
            )
            parser.print_usage(sys.stderr)
            sys.exit(EXIT_INPUT_ERROR)
        output_dir = Path(args.output).resolve()

    logger.info("Schema:  %s", schema_path)
    logger.info("Output:  %s", output_dir or "(dry run)")

    exit_code: int = _run_generation(schema_path, output_dir, args)

    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)

    sys.exit(exit_code)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("clientgen.cli loaded.")
