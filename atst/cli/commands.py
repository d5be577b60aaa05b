# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the AT-ST CLI.

Each function here corresponds to one CLI subcommand and returns its exit
code. Scores go to stdout through the progress reporter, `check` and `info`
print a JSON document to stdout, and everything else is logged as JSON on
stderr.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from atst import __version__
from atst.cli.exit_codes import (
    CONFIG_ERROR,
    EVALUATION_FAILURES,
    RUNTIME_ERROR,
    SUCCESS,
    USER_ERROR,
)
from atst.config.exceptions import ConfigError
from atst.config.loader import load_config, resolve_config_path
from atst.evaluation.errors import EvaluationError
from atst.logging.logger import get_logger, set_level


def _setup_logging(args: argparse.Namespace, command_name: str) -> logging.Logger:
    """Apply --log-level to every logger and return the command's own logger."""
    log_file = Path(args.log_file) if args.log_file else None
    logger = get_logger(f"atst.cli.{command_name}", log_level=args.log_level, log_file=log_file)
    set_level(args.log_level)
    return logger


def _write_json(document: dict[str, object]) -> None:
    sys.stdout.write(json.dumps(document, indent=2, sort_keys=True) + "\n")


def handle_run(args: argparse.Namespace) -> int:
    """Evaluate every solution of a project and print their scores."""
    logger = _setup_logging(args, "run")

    from atst.evaluation.pipeline import evaluate_config
    from atst.evaluation.reporting.progress import ProgressReporter
    from atst.evaluation.reporting.writer import write_report
    from atst.runtime.environment import check_minimum_python, missing_tools

    project_dir = Path(args.project_dir)
    if not project_dir.is_dir():
        logger.error("Project directory not found", extra={"project": str(project_dir)})
        return USER_ERROR

    try:
        check_minimum_python()
    except RuntimeError as err:
        logger.error("Unsupported environment", extra={"error": str(err)})
        return RUNTIME_ERROR

    try:
        config = load_config(resolve_config_path(project_dir, Path(args.config)))
    except ConfigError as err:
        logger.error("Configuration error", extra={"command": "run", "error": str(err)})
        return CONFIG_ERROR

    missing = missing_tools(config.compiler.cc)
    if missing:
        logger.warning("Some external tools are not installed", extra={"missing": missing})

    reporter = ProgressReporter(verbose=args.verbose)
    try:
        result = evaluate_config(
            project_dir,
            config,
            only_solution=args.solution,
            keep_going=args.keep_going,
            reporter=reporter,
        )
    except ConfigError as err:
        logger.error("Configuration error", extra={"command": "run", "error": str(err)})
        return CONFIG_ERROR
    except EvaluationError as err:
        logger.error("Evaluation aborted", extra={"command": "run", "error": str(err)})
        return RUNTIME_ERROR

    if args.output:
        try:
            write_report(result, Path(args.output))
        except OSError as err:
            logger.error("Cannot write report", extra={"output": args.output, "error": str(err)})
            return RUNTIME_ERROR

    if not result.ok:
        logger.warning(
            "Some solutions could not be evaluated",
            extra={"failed": sorted(result.failures)},
        )
        return EVALUATION_FAILURES
    return SUCCESS


def handle_check(args: argparse.Namespace) -> int:
    """Validate a project config, including the files its tests reference."""
    logger = _setup_logging(args, "check")

    from atst.evaluation.factory import build_analysers, build_tests

    project_dir = Path(args.project_dir)
    config_path = resolve_config_path(project_dir, Path(args.config))
    try:
        config = load_config(config_path)
        tests = build_tests(config, project_dir)
    except ConfigError as err:
        logger.error("Configuration error", extra={"command": "check", "error": str(err)})
        return CONFIG_ERROR

    analysers = build_analysers(config)
    _write_json({
        "config": str(config_path),
        "source": config.source,
        "compiler": config.compiler.cc,
        "tests": [
            {"name": t.name, "score": t.score, "cases": len(t.cases), "requirement": t.requirement.value}
            for t in tests
        ],
        "max_score": sum(t.score for t in tests),
        "analysers": [a.kind for a in analysers],
        "scripts": list(config.scripts),
    })
    return SUCCESS


def handle_info(args: argparse.Namespace) -> int:
    """Display version, environment and the external tools AT-ST relies on."""
    _setup_logging(args, "info")

    from atst.runtime.environment import find_tools, get_system_info

    system_info = get_system_info()
    _write_json({
        "atst_version": __version__,
        "python_version": system_info.python_version,
        "platform": system_info.platform,
        "architecture": system_info.architecture,
        "hostname": system_info.hostname,
        "tools": find_tools(args.compiler),
    })
    return SUCCESS
