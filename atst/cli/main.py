# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for AT-ST.

This is the single root command, every operation is a subcommand of `atst`.
The global options (--log-level, --log-file) are inherited by every
subcommand through argparse's parent parser mechanism.

Usage:
    atst run PROJECT_DIR config.yaml
    atst run PROJECT_DIR config.yaml --solution alice --verbose
    atst run PROJECT_DIR config.yaml --keep-going --output results.json
    atst check PROJECT_DIR config.yaml
    atst info
"""

import argparse
import sys
from typing import Optional, Sequence

from atst.cli.commands import handle_check, handle_info, handle_run
from atst.cli.exit_codes import USER_ERROR


def _build_global_parser() -> argparse.ArgumentParser:
    """
    Build the parent parser with global options.

    We use a separate parent parser (with add_help=False) so that help text
    doesn't collide between the parent and the subcommand parsers.
    """
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging verbosity level (logs go to stderr).",
    )
    parent.add_argument(
        "--log-file",
        type=str,
        default=None,
        dest="log_file",
        help="Also write the JSON logs to this file.",
    )
    return parent


def _add_project_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("project_dir", help="Directory with one sub-directory per solution.")
    parser.add_argument(
        "config",
        help="Project configuration (YAML), relative to PROJECT_DIR unless absolute.",
    )


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    parent: argparse.ArgumentParser,
) -> None:
    """
    Register all subcommands with their handler functions.

    Each subcommand gets the global options from the parent parser and sets
    its handler function via set_defaults(func=...).
    """
    run_parser = subparsers.add_parser(
        "run", parents=[parent], help="Evaluate the solutions of a project.",
    )
    _add_project_arguments(run_parser)
    run_parser.add_argument(
        "-s", "--solution",
        type=str,
        default=None,
        help="Evaluate only this solution (a sub-directory name).",
    )
    run_parser.add_argument(
        "--keep-going",
        action="store_true",
        default=False,
        dest="keep_going",
        help="Don't stop at the first solution whose evaluation fails.",
    )
    run_parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Write a JSON report with all scores to this file.",
    )
    run_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Print a line for every test and script.",
    )
    run_parser.set_defaults(func=handle_run)

    check_parser = subparsers.add_parser(
        "check", parents=[parent], help="Validate a project configuration.",
    )
    _add_project_arguments(check_parser)
    check_parser.set_defaults(func=handle_check)

    info_parser = subparsers.add_parser(
        "info", parents=[parent], help="Display environment and tool information.",
    )
    info_parser.add_argument(
        "--compiler",
        type=str,
        default="gcc",
        help="Compiler to look for on PATH.",
    )
    info_parser.set_defaults(func=handle_info)


def build_parser() -> argparse.ArgumentParser:
    parent = _build_global_parser()
    root_parser = argparse.ArgumentParser(
        prog="atst",
        description="AT-ST: automatic testing of student C solutions.",
        parents=[parent],
    )
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, parent)
    return root_parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """
    Main CLI entrypoint. This is what pyproject.toml's [project.scripts] points to.

    If no subcommand is given, we show help and exit with USER_ERROR.
    """
    root_parser = build_parser()
    args = root_parser.parse_args(argv)

    if not hasattr(args, "func") or args.func is None:
        root_parser.print_help()
        sys.exit(USER_ERROR)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
