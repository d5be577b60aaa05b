# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Test execution module: runs the solution's binary against every test.

Each test case goes through the same steps:

    spawn -> write stdin -> wait (timeout) -> [kill -> reap] -> capture -> match

A case passes when every expectation it declares matches. A case that hits
the timeout is killed and fails, a hung program can't pass anything. Cases
are tallied per test and the test's requirement (ALL or ANY) decides whether
its score is awarded. There is no partial credit.

A solution without a binary (it didn't compile or link) gets no tests run.
"""

from pathlib import Path
from typing import Optional, Sequence

from atst.evaluation.errors import SolutionExecError
from atst.evaluation.models import ANY_OUTPUT, Solution, Test, TestCase
from atst.evaluation.modules.base import Module
from atst.evaluation.process import decode_lossy, run_bounded
from atst.evaluation.reporting.progress import ProgressReporter
from atst.logging.logger import get_logger

logger = get_logger(__name__)


def expectation_matches(
    expected: Optional[str],
    actual: str,
    case_insensitive: bool = False,
) -> bool:
    """
    Match one output stream against its expectation.

      - None: not checked, always matches
      - "*": matches any output that isn't just whitespace
      - anything else: equal after trimming both sides (and case-folding
        both when `case_insensitive` is set)
    """
    if expected is None:
        return True

    actual = actual.strip()
    if expected == ANY_OUTPUT:
        return bool(actual)

    expected = expected.strip()
    if case_insensitive:
        return actual.casefold() == expected.casefold()
    return actual == expected


def run_case(binary: Path, case: TestCase, cwd: Path, timeout_ms: int) -> bool:
    """
    Run one test case and tell whether it passed.

    Raises:
        SolutionExecError: The binary could not be spawned or its pipes failed.
    """
    stdin = case.stdin.encode("utf-8") if case.stdin is not None else None
    try:
        result = run_bounded(
            [str(binary.resolve()), *case.args], cwd=cwd, timeout_ms=timeout_ms, stdin=stdin,
        )
    except OSError as err:
        raise SolutionExecError(f"cannot run {binary}: {err}") from err

    if result.timed_out:
        return False

    return expectation_matches(
        case.stdout, decode_lossy(result.stdout), case.case_insensitive,
    ) and expectation_matches(
        case.stderr, decode_lossy(result.stderr), case.case_insensitive,
    )


class TestExecutor(Module):
    """Run the configured tests in order and award their scores."""

    __test__ = False

    name = "tests"

    def __init__(
        self,
        tests: Sequence[Test],
        timeout_ms: int,
        reporter: Optional[ProgressReporter] = None,
    ) -> None:
        self._tests = tuple(tests)
        self._timeout_ms = timeout_ms
        self._reporter = reporter

    def execute(self, solution: Solution) -> None:
        binary = solution.binary_path
        if not binary.is_file():
            logger.info(
                "No binary, skipping tests",
                extra={"solution": solution.name, "binary": str(binary)},
            )
            return

        for test in self._tests:
            cases_passed = 0
            for case in test.cases:
                if run_case(binary, case, solution.path, self._timeout_ms):
                    cases_passed += 1

            passed = test.requirement.is_met(cases_passed, len(test.cases))
            if passed:
                solution.score += test.score

            logger.debug(
                "Test evaluated",
                extra={
                    "solution": solution.name,
                    "test": test.name,
                    "cases_passed": cases_passed,
                    "total_cases": len(test.cases),
                    "requirement": test.requirement.value,
                    "passed": passed,
                },
            )
            if self._reporter is not None:
                self._reporter.test_finished(solution.name, test.name, passed)

    def __repr__(self) -> str:
        return f"TestExecutor(tests={len(self._tests)}, timeout_ms={self._timeout_ms})"
