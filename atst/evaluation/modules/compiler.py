# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Compiler module: turns a solution's source into an object file and a binary.

The sequence is:
  1. Remove stale artifacts so a binary from an earlier run can never be tested
  2. Compile the source into the object file
  3. Link the object file into the binary
  4. Compile once more with -Werror, only to find out whether there were warnings

A source that doesn't compile or link is not an error. It just leaves no
binary behind, every later module notices that, and the solution ends up
with nothing. The only reportable failure is a compiler we can't execute.
"""

import os
from typing import Optional

from atst.evaluation.models import Solution
from atst.evaluation.modules.base import Module
from atst.evaluation.process import run_tool
from atst.logging.logger import get_logger
from atst.utils.filesystem import safe_delete

logger = get_logger(__name__)

# Subtracted once when the source compiles but not with -Werror.
WARNING_PENALTY = 0.5


class Compiler(Module):
    """Build a solution with the configured compiler and flags."""

    name = "compiler"

    def __init__(
        self,
        cc: str = "gcc",
        cflags: str = "",
        ldflags: str = "",
        timeout_ms: Optional[int] = None,
    ) -> None:
        self._cc = cc
        self._cflags = cflags.split()
        self._ldflags = ldflags.split()
        self._timeout_ms = timeout_ms

    def execute(self, solution: Solution) -> None:
        safe_delete(solution.object_path)
        safe_delete(solution.binary_path)

        src = str(solution.src_file)
        obj = str(solution.obj_file)
        binary = str(solution.bin_file)

        if not self._run(solution, [*self._cflags, "-c", src, "-o", obj], "compile"):
            return
        # Link flags go after the object so `-lm` and friends resolve its symbols.
        if not self._run(solution, [obj, *self._ldflags, "-o", binary], "link"):
            return

        if not self._run(
            solution, [*self._cflags, "-Werror", "-c", src, "-o", os.devnull], "warnings",
        ):
            solution.score -= WARNING_PENALTY
            logger.info(
                "Compiler warnings penalised",
                extra={"solution": solution.name, "penalty": -WARNING_PENALTY},
            )

    def _run(self, solution: Solution, args: list[str], step: str) -> bool:
        result = run_tool([self._cc, *args], cwd=solution.path, timeout_ms=self._timeout_ms)
        if not result.success:
            logger.info(
                "Compiler step failed",
                extra={
                    "solution": solution.name,
                    "step": step,
                    "exit_code": result.returncode,
                    "timed_out": result.timed_out,
                    "stderr": result.stderr.decode("utf-8", errors="replace")[-2000:],
                },
            )
        return result.success

    def __repr__(self) -> str:
        return f"Compiler(cc={self._cc!r}, cflags={self._cflags!r}, ldflags={self._ldflags!r})"
