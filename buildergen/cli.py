#!/usr/bin/env python3
"""
Builder Generator CLI

Generates ``<Record>Builder`` classes for the records of a Python module.

Usage:
    buildergen records.py                      # writes records_builders.py
    buildergen records.py --record Command     # explicit targets, no decorator needed
    buildergen records.py --stdout             # print instead of writing
    buildergen records.py --check-only         # CI: fail if the committed file is stale

Exit codes:
    0  generated (or up to date)
    1  attribute diagnostics reported, or --check-only found a stale file
    2  fatal generation error; nothing was written
"""

import argparse
import sys
from pathlib import Path

from .config import load_generator_config
from .errors import ConfigError, GenerationError
from .generator import generate_file, module_name_for, output_path_for

EXIT_OK = 0
EXIT_DIAGNOSTICS = 1
EXIT_FATAL = 2


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="buildergen",
        description="Generate builder classes for the record types of a Python module",
    )
    parser.add_argument("source", help="Python module declaring the record classes")
    parser.add_argument(
        "--record",
        action="append",
        dest="records",
        metavar="NAME",
        help="Generate for this record (repeatable). Default: classes decorated with @derive_builder",
    )
    parser.add_argument(
        "--module",
        help="Import path of the source module used by the generated code (default: file stem)",
    )
    parser.add_argument("--output", help="Output path (default: <stem>_builders.py beside the source)")
    parser.add_argument("--config", help="Path to .buildergen.yaml (default: ./.buildergen.yaml)")
    parser.add_argument(
        "--check-only",
        action="store_true",
        help="Check if the generated file matches the committed version (for CI)",
    )
    parser.add_argument("--stdout", action="store_true", help="Print the generated module instead of writing it")
    return parser


def write_file(path: Path, content: str):
    """Write generated content to file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    print(f"  Wrote {path}")


def main(argv: list[str] | None = None) -> int:
    """Entry point for the builder generator."""
    args = build_arg_parser().parse_args(argv)
    source_path = Path(args.source)

    # Progress goes to stderr when stdout carries the generated module
    progress = sys.stderr if args.stdout else sys.stdout

    def report(message: str = "") -> None:
        print(message, file=progress)

    try:
        config = load_generator_config(Path.cwd(), args.config)
    except ConfigError as e:
        print(f"  ERROR: {e}", file=sys.stderr)
        return EXIT_FATAL

    output_path = Path(args.output) if args.output else output_path_for(source_path, config)
    module_name = args.module or module_name_for(source_path)

    report("=" * 60)
    report("Builder Generator")
    report("=" * 60)
    if config.config_path:
        report(f"  Config: {config.config_path}")

    report(f"\n[1/3] Parsing {source_path}...")
    try:
        result = generate_file(source_path, module_name, args.records, config)
    except GenerationError as e:
        print(f"  FATAL: {e}", file=sys.stderr)
        print("  No output was generated.", file=sys.stderr)
        return EXIT_FATAL
    report(f"  Found {len(result.records)} records")

    report("\n[2/3] Classifying fields...")
    for outcome in result.outcomes:
        if outcome.ok:
            report(f"  {outcome.artifact.builder_name}: {', '.join(outcome.artifact.field_order) or '(no fields)'}")
        else:
            print(f"  {outcome.diagnostic}", file=sys.stderr)

    exit_code = EXIT_DIAGNOSTICS if result.diagnostics else EXIT_OK

    report("\n[3/3] Rendering builders...")
    if args.stdout:
        sys.stdout.write(result.source)
    elif args.check_only:
        if not output_path.exists():
            print(f"  ERROR: {output_path} does not exist", file=sys.stderr)
            exit_code = EXIT_DIAGNOSTICS
        elif output_path.read_text(encoding="utf-8") != result.source:
            print(f"  ERROR: Generated builders differ from {output_path}", file=sys.stderr)
            print(f"  Run: buildergen {source_path}", file=sys.stderr)
            exit_code = EXIT_DIAGNOSTICS
        else:
            report("  OK: Generated file matches committed version")
    else:
        write_file(output_path, result.source)
        built = sum(1 for o in result.outcomes if o.ok)
        report(f"\n✓ Generated {built} builders")

    if result.diagnostics:
        report(f"  {len(result.diagnostics)} records skipped with errors")

    report("\n" + "=" * 60)
    report("Generation complete")
    report("=" * 60)
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
