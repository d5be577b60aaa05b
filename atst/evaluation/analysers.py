# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Static analyses of a solution.

An analyser is a yes/no question about the solution ("does it call exit?",
"does it include string.h?", "does it have global variables?") plus a
penalty. When the answer is yes, the penalty (usually negative) is added to
the score. That's the whole contract.

The analyser kinds form a closed set. Each kind is a frozen dataclass that
carries only its own parameters, `Analyser` is the union of them, and
`analyse()` dispatches on the kind. Adding a kind means adding a dataclass,
a branch in `analyse()` and a config model.

Analysers are stateless: the same instance is applied to every solution.
"""

import re
from dataclasses import dataclass
from typing import Optional, Union

from atst.evaluation.errors import InternalError
from atst.evaluation.models import Solution
from atst.evaluation.process import run_tool

# nm symbol types that live in writable or initialized data: bss, data,
# common, small data. Function-local statics get a `.N` suffix from gcc
# (`counter.0`) and are deliberately not matched by the name part.
_GLOBAL_SYMBOL_RE = re.compile(
    r"^\s*[0-9a-fA-F]*\s+[BbCDdGgSs]\s+[A-Za-z_$][\w$]*\s*$",
    re.MULTILINE,
)


@dataclass(frozen=True)
class NoCallAnalyser:
    """True if the preprocessed source calls any of `funs`."""

    funs: tuple[str, ...]
    penalty: float

    kind = "no-call"

    def pattern(self) -> re.Pattern[str]:
        """
        One pattern for all names: `\\bname\\s*\\(`.

        The word boundary keeps `foo` from matching `myfoo(`, and `\\(` keeps
        it from matching `foobar(`. Names are used as regex fragments, so a
        malformed one is reported rather than silently escaped.
        """
        alternatives = "|".join(f"(?:{fun})" for fun in self.funs)
        try:
            return re.compile(rf"\b(?:{alternatives})\s*\(")
        except re.error as err:
            raise InternalError(
                f"invalid function name pattern in no-call analyser {list(self.funs)}: {err}"
            ) from err


@dataclass(frozen=True)
class NoHeaderAnalyser:
    """True if the source includes `header` with angle brackets."""

    header: str
    penalty: float

    kind = "no-header"


@dataclass(frozen=True)
class NoGlobalsAnalyser:
    """
    True if the compiled object file defines a global variable.

    Asks `nm` for the symbol table, so it needs the object file produced by
    the compiler module.
    """

    penalty: float
    nm: str = "nm"
    timeout_ms: Optional[int] = None

    kind = "no-globals"


Analyser = Union[NoCallAnalyser, NoHeaderAnalyser, NoGlobalsAnalyser]


def analyse(analyser: Analyser, solution: Solution) -> bool:
    """
    Run one analyser on a solution.

    Returns:
        True when the checked property holds and the penalty applies.

    Raises:
        InternalError: Bad function pattern, failing or undecodable nm.
        ExecError: nm is not installed.
    """
    if isinstance(analyser, NoCallAnalyser):
        return analyser.pattern().search(solution.source) is not None
    if isinstance(analyser, NoHeaderAnalyser):
        return analyser.header in solution.included
    if isinstance(analyser, NoGlobalsAnalyser):
        return _has_globals(analyser, solution)
    raise InternalError(f"unsupported analyser {type(analyser).__name__}")


def _has_globals(analyser: NoGlobalsAnalyser, solution: Solution) -> bool:
    result = run_tool(
        [analyser.nm, str(solution.obj_file)],
        cwd=solution.path,
        timeout_ms=analyser.timeout_ms,
    )
    if result.timed_out:
        raise InternalError(f"'{analyser.nm}' timed out on {solution.object_path}")
    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        raise InternalError(
            f"'{analyser.nm}' failed on {solution.object_path}: {stderr}"
        )

    try:
        symbols = result.stdout.decode("utf-8")
    except UnicodeDecodeError as err:
        raise InternalError(f"cannot decode output of '{analyser.nm}': {err}") from err

    return _GLOBAL_SYMBOL_RE.search(symbols) is not None
