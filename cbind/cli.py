"""
Command-line interface for cbind.

Usage:
    python -m cbind <command> [options]

Commands:
    lower    Parse a header and list its lowered declarations
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

from .config import TranslatorConfig, parse_const_rule
from .errors import TranslationError
from .parser import ClangParser
from .translator import Translator, TranslatorState

logger = logging.getLogger("cbind.cli")


def parse_define(text: str) -> tuple[str, str]:
    """Split ``NAME=VALUE`` (or bare ``NAME``) into a define pair."""
    name, _, value = text.partition("=")
    return name, value


def format_state(state: TranslatorState, out: TextIO) -> None:
    """Write one line per typedef and declaration, then the constant map."""
    for decl in state.typedefs:
        print(f"typedef\t{decl.name}\t{decl.spec}", file=out)
    for decl in state.declares:
        print(f"decl\t{decl.name or '-'}\t{decl.spec}", file=out)

    for name, value in state.value_map.items():
        expression = state.expr_map.get(name)
        if expression is not None:
            print(f"const\t{name}\t{value!r}\t{expression}", file=out)
        else:
            print(f"const\t{name}\t{value!r}", file=out)


def lower_header(config: TranslatorConfig, header: Path, out: Optional[TextIO] = None) -> int:
    """Parse and lower one header, printing the result."""
    out = out or sys.stdout
    parser = ClangParser(
        include_dirs=config.include_dirs_abs,
        defines=config.parser.defines,
        clang_args=config.parser.clang_args,
        std=config.parser.std,
    )

    try:
        unit = parser.parse(header)
        state = Translator.from_config(config).walk(unit)
    except TranslationError as e:
        print(f"Error processing {header}: {e}", file=sys.stderr)
        return 1

    logger.info(
        "%s: %d declarations, %d typedefs, %d constants",
        header, len(state.declares), len(state.typedefs), len(state.value_map),
    )
    format_state(state, out)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="cbind",
        description="C declaration lowering for binding generators",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List the declarations of a header
  python -m cbind lower include/api.h

  # Emit enum constants as references to the native library
  python -m cbind lower include/api.h --enum-rule foreign_alias

  # Use custom config file
  python -m cbind --config cbind.toml lower include/api.h
""",
    )

    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file (cbind.toml)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # lower subcommand
    lower_parser = subparsers.add_parser(
        "lower",
        help="Parse a header and list its lowered declarations",
    )
    lower_parser.add_argument(
        "header",
        type=Path,
        help="Input header file",
    )
    lower_parser.add_argument(
        "-I",
        dest="include_dirs",
        action="append",
        type=Path,
        default=[],
        metavar="DIR",
        help="Add include directory",
    )
    lower_parser.add_argument(
        "-D",
        dest="defines",
        action="append",
        default=[],
        metavar="NAME[=VALUE]",
        help="Define preprocessor macro",
    )
    lower_parser.add_argument(
        "--std",
        help="C language standard (default: c99)",
    )
    lower_parser.add_argument(
        "--enum-rule",
        help="How enum constants are emitted: value, foreign_alias or expand",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(levelname)s: %(message)s",
    )

    try:
        # Load configuration
        config = TranslatorConfig.load(args.config)

        # Apply CLI overrides
        if args.enum_rule:
            config.constants.enum = parse_const_rule(args.enum_rule)
    except TranslationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    if args.std:
        config.parser.std = args.std
    config.parser.include_dirs.extend(args.include_dirs)
    config.parser.defines.update(parse_define(d) for d in args.defines)

    # Execute command
    if args.command == "lower":
        return lower_header(config, args.header)

    return 1


if __name__ == "__main__":
    sys.exit(main())
