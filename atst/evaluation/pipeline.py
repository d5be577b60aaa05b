# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Pipeline driver, the heart of the evaluation.

For a project directory and its config, the driver:
  1. Discovers the solutions (sub-directories, minus the excluded ones)
  2. Builds the modules once for the whole batch
  3. For each solution in order, runs every module in order
  4. Records each solution's final score

Solutions without the configured source file are skipped, that is not an
error. Everything is sequential: one solution at a time, one module at a
time.

There are two error policies. `run_pipeline` is strict: the first
EvaluationError aborts the whole batch and no scores are returned, because a
missing compiler or nm would otherwise silently hand out wrong scores to
everyone after that point. `run_pipeline_keep_going` evaluates every
solution, collects failures per solution, and reports them separately from
the scores so a broken evaluation is never mistaken for a zero.
"""

from pathlib import Path
from typing import Optional, Sequence

from atst.config.loader import load_config, resolve_config_path
from atst.config.schema import ProjectConfig
from atst.evaluation.errors import EvaluationError, InternalError
from atst.evaluation.factory import build_modules
from atst.evaluation.models import BatchResult, Solution
from atst.evaluation.modules.base import Module
from atst.evaluation.reporting.progress import ProgressReporter
from atst.logging.logger import get_logger

logger = get_logger(__name__)


def discover_solutions(
    project_dir: Path,
    config: ProjectConfig,
    only_solution: Optional[str] = None,
) -> list[Solution]:
    """
    Find the solutions to evaluate.

    Every sub-directory of the project is a solution unless its name is in
    `solutions.exclude-dirs`. Directories are sorted by name so the order
    (and the output) is the same on every filesystem. With `only_solution`
    just that one directory is evaluated, if it exists.

    Raises:
        InternalError: The project directory can't be listed.
    """
    if only_solution:
        path = project_dir / only_solution
        if not path.is_dir():
            logger.warning(
                "Selected solution does not exist",
                extra={"solution": only_solution, "project": str(project_dir)},
            )
            return []
        return [Solution.for_directory(path, config.source)]

    excluded = set(config.solutions.exclude_dirs)
    try:
        entries = sorted(project_dir.iterdir(), key=lambda p: p.name)
    except OSError as err:
        raise InternalError(f"could not read project directory {project_dir}: {err}") from err

    return [
        Solution.for_directory(entry, config.source)
        for entry in entries
        if entry.is_dir() and entry.name not in excluded
    ]


def evaluate_solution(solution: Solution, modules: Sequence[Module]) -> float:
    """
    Run every module on one solution and return its final score.

    Raises:
        EvaluationError: From the first module that fails; later modules don't run.
    """
    for module in modules:
        logger.debug(
            "Running module",
            extra={"solution": solution.name, "module": module.name},
        )
        module.execute(solution)
    return solution.score


def _run(
    solutions: Sequence[Solution],
    modules: Sequence[Module],
    reporter: Optional[ProgressReporter],
    keep_going: bool,
) -> BatchResult:
    result = BatchResult()

    for solution in solutions:
        if not solution.source_path.is_file():
            result.skipped.append(solution.name)
            logger.info(
                "No source found, skipping solution",
                extra={"solution": solution.name, "source": str(solution.src_file)},
            )
            if reporter is not None:
                reporter.solution_skipped(solution.name)
            continue

        if reporter is not None:
            reporter.solution_started(solution.name)

        try:
            score = evaluate_solution(solution, modules)
        except EvaluationError as err:
            logger.error(
                "Solution evaluation failed",
                extra={"solution": solution.name, "error": str(err)},
            )
            if not keep_going:
                raise
            result.failures[solution.name] = str(err)
            if reporter is not None:
                reporter.solution_failed(solution.name, str(err))
            continue

        result.scores[solution.name] = score
        logger.info("Solution evaluated", extra={"solution": solution.name, "score": score})
        if reporter is not None:
            reporter.solution_finished(solution.name, score)

    return result


def run_pipeline(
    solutions: Sequence[Solution],
    modules: Sequence[Module],
    reporter: Optional[ProgressReporter] = None,
) -> dict[str, float]:
    """
    Evaluate all solutions, failing fast.

    Returns:
        Solution name -> final score, for every solution that had a source.

    Raises:
        EvaluationError: The first error of any module on any solution. No
            partial result is returned.
    """
    return _run(solutions, modules, reporter, keep_going=False).scores


def run_pipeline_keep_going(
    solutions: Sequence[Solution],
    modules: Sequence[Module],
    reporter: Optional[ProgressReporter] = None,
) -> BatchResult:
    """Evaluate all solutions, collecting per-solution failures instead of aborting."""
    return _run(solutions, modules, reporter, keep_going=True)


def evaluate_project(
    project_dir: Path,
    config_file: Path,
    only_solution: Optional[str] = None,
    keep_going: bool = False,
    reporter: Optional[ProgressReporter] = None,
) -> BatchResult:
    """
    Load the config, discover the solutions and evaluate them.

    `config_file` is relative to `project_dir` unless it is absolute.

    Raises:
        ConfigError: The config can't be loaded or references unreadable files.
        EvaluationError: Only when `keep_going` is off.
    """
    config = load_config(resolve_config_path(project_dir, config_file))
    return evaluate_config(
        project_dir, config, only_solution=only_solution, keep_going=keep_going, reporter=reporter,
    )


def evaluate_config(
    project_dir: Path,
    config: ProjectConfig,
    only_solution: Optional[str] = None,
    keep_going: bool = False,
    reporter: Optional[ProgressReporter] = None,
) -> BatchResult:
    """
    Discover the solutions of a project and evaluate them with a loaded config.

    Raises:
        ConfigError: A test references an unreadable file.
        EvaluationError: Only when `keep_going` is off.
    """
    solutions = discover_solutions(project_dir, config, only_solution)
    if not solutions:
        logger.warning("No solutions to analyse", extra={"project": str(project_dir)})
        return BatchResult()

    modules = build_modules(config, project_dir, reporter=reporter)
    logger.info(
        "Evaluation started",
        extra={
            "project": str(project_dir),
            "solutions": len(solutions),
            "modules": [repr(m) for m in modules],
            "keep_going": keep_going,
        },
    )
    return _run(solutions, modules, reporter, keep_going=keep_going)
