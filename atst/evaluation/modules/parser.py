# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Parser module: extracts the facts the analysers work on.

After this module the solution knows:
  - `included`: every header pulled in with `#include <...>`
  - `source`: the preprocessed source without any directive lines

System includes are stripped before the preprocessor runs. That way only
the student's own macros get expanded, and a `#define` hiding a forbidden
call is still caught, while the thousands of lines of libc headers never
reach the analysers.

A source file that can't be read leaves both facts empty. That is not an
error: the analysers simply find nothing.
"""

import re
from typing import Optional

from atst.evaluation.errors import InternalError
from atst.evaluation.models import Solution
from atst.evaluation.modules.base import Module
from atst.evaluation.process import decode_lossy, run_tool
from atst.logging.logger import get_logger
from atst.utils.filesystem import read_text_lossy

logger = get_logger(__name__)

_INCLUDE_RE = re.compile(r"^[ \t]*#[ \t]*include[ \t]*<([^>\n]*)>.*$", re.MULTILINE)


def find_includes(source: str) -> list[str]:
    """Header names of all angle-bracket includes, `"local.h"` ones are ignored."""
    return [header.strip() for header in _INCLUDE_RE.findall(source)]


def strip_includes(source: str) -> str:
    """Blank out angle-bracket include lines, keeping line numbering intact."""
    return _INCLUDE_RE.sub("", source)


def drop_directives(preprocessed: str) -> str:
    """Remove the `# 1 "<stdin>"` style line markers the preprocessor emits."""
    return "\n".join(
        line for line in preprocessed.splitlines() if not line.startswith("#")
    )


class Parser(Module):
    """Normalize, scan and preprocess the solution's source."""

    name = "parser"

    def __init__(
        self,
        cc: str = "gcc",
        normalizer: str = "dos2unix",
        timeout_ms: Optional[int] = None,
    ) -> None:
        self._cc = cc
        self._normalizer = normalizer
        self._timeout_ms = timeout_ms

    def execute(self, solution: Solution) -> None:
        if not solution.source_path.is_file():
            logger.warning(
                "Source file missing, nothing to parse",
                extra={"solution": solution.name, "source": str(solution.source_path)},
            )
            return

        self._normalize_line_endings(solution)

        try:
            raw = read_text_lossy(solution.source_path)
        except OSError as err:
            logger.warning(
                "Cannot read source file",
                extra={"solution": solution.name, "error": str(err)},
            )
            return

        solution.included.extend(find_includes(raw))
        solution.source = self._preprocess(solution, strip_includes(raw))

    def _normalize_line_endings(self, solution: Solution) -> None:
        result = run_tool(
            [self._normalizer, str(solution.src_file)],
            cwd=solution.path,
            timeout_ms=self._timeout_ms,
        )
        if not result.success:
            logger.warning(
                "Line ending normalization failed, continuing with the source as is",
                extra={
                    "solution": solution.name,
                    "exit_code": result.returncode,
                    "timed_out": result.timed_out,
                },
            )

    def _preprocess(self, solution: Solution, source: str) -> str:
        result = run_tool(
            [self._cc, "-E", "-"],
            cwd=solution.path,
            timeout_ms=self._timeout_ms,
            stdin=source.encode("utf-8"),
        )
        if result.timed_out:
            raise InternalError(f"preprocessor '{self._cc} -E' timed out on {solution.name}")
        if result.returncode != 0:
            # Whatever the preprocessor managed to expand is still worth analysing.
            logger.info(
                "Preprocessor reported errors",
                extra={
                    "solution": solution.name,
                    "exit_code": result.returncode,
                    "stderr": decode_lossy(result.stderr)[-2000:],
                },
            )
        return drop_directives(decode_lossy(result.stdout))

    def __repr__(self) -> str:
        return f"Parser(cc={self._cc!r}, normalizer={self._normalizer!r})"
