# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Script module: hooks for checks the built-in modules can't express.

A script runs inside the solution directory. To change the score it writes
`<script-stem>.log` next to the solution, one adjustment per line:

    0.5: handles empty input
    -1: leaks memory

Everything up to the first colon must parse as a number, the rest is free
text. Lines that don't parse are ignored, and so is a missing log file.
"""

import math
from pathlib import Path
from typing import Optional

from atst.evaluation.models import Solution
from atst.evaluation.modules.base import Module
from atst.evaluation.process import run_tool
from atst.evaluation.reporting.progress import ProgressReporter
from atst.logging.logger import get_logger
from atst.utils.filesystem import read_text_lossy, safe_delete

logger = get_logger(__name__)


def parse_score_log(text: str) -> float:
    """Sum of the numbers prefixing the lines of a script log."""
    total = 0.0
    for line in text.splitlines():
        prefix = line.split(":", 1)[0].strip()
        # float() also takes digit separators ("1_0"), which aren't numbers here.
        if "_" in prefix:
            continue
        try:
            value = float(prefix)
        except ValueError:
            continue
        if math.isfinite(value):
            total += value
    return total


class ScriptExecutor(Module):
    """Run one extension script on a solution and apply the score it reports."""

    name = "script"

    def __init__(
        self,
        script_path: Path,
        timeout_ms: Optional[int] = None,
        reporter: Optional[ProgressReporter] = None,
    ) -> None:
        self._script = script_path
        self._timeout_ms = timeout_ms
        self._reporter = reporter

    @property
    def log_name(self) -> str:
        return f"{self._script.stem}.log"

    def execute(self, solution: Solution) -> None:
        log_path = solution.path / self.log_name
        # A log left over from an earlier run must not be counted twice.
        safe_delete(log_path)

        if self._reporter is not None:
            self._reporter.script_started(solution.name, self._script.name)

        result = run_tool([str(self._script)], cwd=solution.path, timeout_ms=self._timeout_ms)
        if not result.success:
            logger.warning(
                "Script did not finish cleanly",
                extra={
                    "solution": solution.name,
                    "script": str(self._script),
                    "exit_code": result.returncode,
                    "timed_out": result.timed_out,
                },
            )

        try:
            text = read_text_lossy(log_path)
        except OSError:
            logger.debug(
                "Script left no score log",
                extra={"solution": solution.name, "log": str(log_path)},
            )
            return

        delta = parse_score_log(text)
        solution.score += delta
        logger.info(
            "Script score applied",
            extra={"solution": solution.name, "script": self._script.name, "delta": delta},
        )

    def __repr__(self) -> str:
        return f"ScriptExecutor({str(self._script)!r})"
