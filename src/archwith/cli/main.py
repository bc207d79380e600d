# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the archwith command-line interface."""

import argparse
import sys
from pathlib import Path

from yachalk import chalk

from archwith.compiler.artifact import serialize
from archwith.compiler.build import BuildError, generate_file
from archwith.compiler.pipeline import CompileResult, compile_mirrors
from archwith.config.mirror_file import MirrorFileError, load_mirror_file
from archwith.model.diagnostics import Diagnostic

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the archwith CLI."""
    parser = argparse.ArgumentParser(
        prog="archwith",
        description="archwith - generate archive adapters for remote types",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # check subcommand
    check_parser = subparsers.add_parser(
        "check",
        help="Check mirror declaration files for errors",
        description="Compile mirror declaration files and report diagnostics without writing anything.",
    )
    check_parser.add_argument("files", nargs="+", help="Mirror declaration files (YAML)")

    # generate subcommand
    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate the adapter module for a declaration file",
        description=(
            "Compile a mirror declaration file and write the generated adapter module. "
            "The module is only rewritten when the declaration file is newer."
        ),
    )
    generate_parser.add_argument("file", help="Mirror declaration file (YAML)")
    generate_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output module path (default: the file's 'output' entry, or FILE with a .py suffix)",
    )
    generate_parser.add_argument(
        "--force",
        action="store_true",
        help="Regenerate even if the output is up to date",
    )

    # table subcommand
    table_parser = subparsers.add_parser(
        "table",
        help="Dump the validated field mapping tables as JSON",
        description="Compile a mirror declaration file and write its field mapping tables as a JSON artifact.",
    )
    table_parser.add_argument("file", help="Mirror declaration file (YAML)")
    table_parser.add_argument("-o", "--output", default=None, help="Artifact path (default: standard output)")

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    sys.exit(_dispatch(args))


# ################
# Implementation
# ################


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "check":
        return _cmd_check(args)
    if args.command == "generate":
        return _cmd_generate(args)
    if args.command == "table":
        return _cmd_table(args)
    return 0


def _print_error(message: str) -> None:
    print(f"{chalk.red('Error:')} {message}", file=sys.stderr)


def _report(results: list[CompileResult], source_label: str) -> bool:
    """Print every diagnostic of *results*; return True if any of them is an error."""
    has_errors = False
    for result in results:
        for diagnostic in result.diagnostics:
            _print_diagnostic(diagnostic, source_label)
            has_errors = has_errors or diagnostic.is_error
    return has_errors


def _print_diagnostic(diagnostic: Diagnostic, source_label: str) -> None:
    if diagnostic.is_error:
        _print_error(f"{source_label}: {diagnostic}")
    else:
        print(f"{chalk.yellow('Note:')} {source_label}: {diagnostic}", file=sys.stderr)


def _cmd_check(args: argparse.Namespace) -> int:
    """Handle the check subcommand."""
    has_errors = False
    for raw in args.files:
        path = Path(raw)
        try:
            mirror_file = load_mirror_file(path)
        except MirrorFileError as exc:
            _print_error(str(exc))
            has_errors = True
            continue

        print(f"Checking {len(mirror_file.types)} mirror type(s) in '{path}'...")
        results = compile_mirrors(mirror_file.types)
        if _report(results, str(path)):
            has_errors = True

    if has_errors:
        return 1

    print(chalk.green("No issues found."))
    return 0


def _cmd_generate(args: argparse.Namespace) -> int:
    """Handle the generate subcommand."""
    source = Path(args.file)
    output = Path(args.output) if args.output is not None else None

    try:
        generated = generate_file(source, output, force=args.force)
    except BuildError as exc:
        _print_error(str(exc))
        return 1

    if generated.up_to_date:
        print(f"'{generated.output}' is up to date.")
        return 0

    if _report(generated.results, str(source)):
        _print_error(f"not writing '{generated.output}' because of the errors above.")
        return 1

    skipped = [r.type_name for r in generated.results if not r.has_deserializer]
    print(f"Generated {len(generated.results)} mirror type(s) into '{generated.output}'.")
    if skipped:
        print(f"  without deserializer: {', '.join(skipped)}")
    return 0


def _cmd_table(args: argparse.Namespace) -> int:
    """Handle the table subcommand."""
    source = Path(args.file)
    try:
        mirror_file = load_mirror_file(source)
    except MirrorFileError as exc:
        _print_error(str(exc))
        return 1

    results = compile_mirrors(mirror_file.types)
    if _report(results, str(source)):
        return 1

    artifact = serialize([r.table for r in results if r.table is not None])
    if args.output is None:
        print(artifact)
        return 0

    output = Path(args.output)
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(artifact, encoding="utf-8")
    except OSError as exc:
        _print_error(f"cannot write '{output}': {exc}")
        return 1
    print(f"Wrote field mapping tables to '{output}'.")
    return 0
