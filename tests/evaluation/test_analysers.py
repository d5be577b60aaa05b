# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the static analysers and the analysis module.

`no-globals` is tested twice: against a fake nm printing a canned symbol
table, and against the real gcc and nm when they are installed.
"""

import shutil
import subprocess
from pathlib import Path
from typing import Callable

import pytest

from atst.evaluation.analysers import (
    NoCallAnalyser,
    NoGlobalsAnalyser,
    NoHeaderAnalyser,
    analyse,
)
from atst.evaluation.errors import ExecError, InternalError
from atst.evaluation.models import Solution
from atst.evaluation.modules.analysis import AnalysisExecutor

requires_toolchain = pytest.mark.skipif(
    shutil.which("gcc") is None or shutil.which("nm") is None,
    reason="gcc and nm are required",
)


def _with_source(solution: Solution, source: str) -> Solution:
    solution.source = source
    return solution


class TestNoCall:
    def test_detects_call(self, make_solution: Callable[..., Solution]) -> None:
        solution = _with_source(make_solution(), "int main() { foo(1); }")
        assert analyse(NoCallAnalyser(funs=("foo",), penalty=-1.0), solution) is True

    def test_whitespace_before_parenthesis(self, make_solution: Callable[..., Solution]) -> None:
        solution = _with_source(make_solution(), "int main() { foo \t (1); }")
        assert analyse(NoCallAnalyser(funs=("foo",), penalty=-1.0), solution) is True

    def test_longer_name_does_not_match(self, make_solution: Callable[..., Solution]) -> None:
        solution = _with_source(make_solution(), "int main() { foobar(1); }")
        assert analyse(NoCallAnalyser(funs=("foo",), penalty=-1.0), solution) is False

    def test_name_suffix_does_not_match(self, make_solution: Callable[..., Solution]) -> None:
        solution = _with_source(make_solution(), "int main() { myfoo(1); }")
        assert analyse(NoCallAnalyser(funs=("foo",), penalty=-1.0), solution) is False

    def test_mention_without_call_does_not_match(
        self, make_solution: Callable[..., Solution]
    ) -> None:
        solution = _with_source(make_solution(), "void (*f)(int) = foo;")
        assert analyse(NoCallAnalyser(funs=("foo",), penalty=-1.0), solution) is False

    def test_any_of_several_names(self, make_solution: Callable[..., Solution]) -> None:
        solution = _with_source(make_solution(), "int main() { abort(); }")
        analyser = NoCallAnalyser(funs=("exit", "abort"), penalty=-1.0)
        assert analyse(analyser, solution) is True

    def test_invalid_pattern_is_internal_error(
        self, make_solution: Callable[..., Solution]
    ) -> None:
        solution = _with_source(make_solution(), "int main() {}")
        with pytest.raises(InternalError):
            analyse(NoCallAnalyser(funs=("bad(",), penalty=-1.0), solution)


class TestNoHeader:
    def test_included_header(self, make_solution: Callable[..., Solution]) -> None:
        solution = make_solution()
        solution.included.extend(["stdio.h", "string.h"])
        assert analyse(NoHeaderAnalyser(header="string.h", penalty=-1.0), solution) is True

    def test_header_not_included(self, make_solution: Callable[..., Solution]) -> None:
        solution = make_solution()
        solution.included.append("stdio.h")
        assert analyse(NoHeaderAnalyser(header="string.h", penalty=-1.0), solution) is False


class TestNoGlobalsWithFakeNm:
    def _nm(self, tmp_path: Path, make_executable: Callable[[Path, str], Path], output: str) -> str:
        return str(make_executable(tmp_path / "fake-nm", f"cat <<'EOF'\n{output}EOF\n"))

    def test_bss_symbol_is_global(
        self, tmp_path: Path, make_solution: Callable[..., Solution],
        make_executable: Callable[[Path, str], Path],
    ) -> None:
        nm = self._nm(tmp_path, make_executable, (
            "0000000000000000 B counter\n"
            "0000000000000000 T main\n"
            "                 U printf\n"
        ))
        analyser = NoGlobalsAnalyser(penalty=-0.1, nm=nm)
        assert analyse(analyser, make_solution()) is True

    def test_common_and_data_symbols_are_global(
        self, tmp_path: Path, make_solution: Callable[..., Solution],
        make_executable: Callable[[Path, str], Path],
    ) -> None:
        for line in ("0000000000000004 C x\n", "0000000000000000 D table\n", "0000000000000000 d hidden\n"):
            nm = self._nm(tmp_path, make_executable, line)
            assert analyse(NoGlobalsAnalyser(penalty=-0.1, nm=nm), make_solution()) is True

    def test_function_local_static_is_not_global(
        self, tmp_path: Path, make_solution: Callable[..., Solution],
        make_executable: Callable[[Path, str], Path],
    ) -> None:
        nm = self._nm(tmp_path, make_executable, (
            "0000000000000000 b counter.0\n"
            "0000000000000000 T main\n"
        ))
        assert analyse(NoGlobalsAnalyser(penalty=-0.1, nm=nm), make_solution()) is False

    def test_functions_only(
        self, tmp_path: Path, make_solution: Callable[..., Solution],
        make_executable: Callable[[Path, str], Path],
    ) -> None:
        nm = self._nm(tmp_path, make_executable, (
            "0000000000000000 T main\n"
            "                 U puts\n"
        ))
        assert analyse(NoGlobalsAnalyser(penalty=-0.1, nm=nm), make_solution()) is False

    def test_failing_nm_is_internal_error(
        self, tmp_path: Path, make_solution: Callable[..., Solution],
        make_executable: Callable[[Path, str], Path],
    ) -> None:
        nm = make_executable(tmp_path / "fake-nm", "echo 'no such file' >&2\nexit 1\n")
        with pytest.raises(InternalError, match="no such file"):
            analyse(NoGlobalsAnalyser(penalty=-0.1, nm=str(nm)), make_solution())

    def test_undecodable_output_is_internal_error(
        self, tmp_path: Path, make_solution: Callable[..., Solution],
        make_executable: Callable[[Path, str], Path],
    ) -> None:
        nm = make_executable(tmp_path / "fake-nm", "printf '\\377\\376 B x\\n'\n")
        with pytest.raises(InternalError, match="decode"):
            analyse(NoGlobalsAnalyser(penalty=-0.1, nm=str(nm)), make_solution())

    def test_missing_nm_is_exec_error(
        self, tmp_path: Path, make_solution: Callable[..., Solution]
    ) -> None:
        analyser = NoGlobalsAnalyser(penalty=-0.1, nm=str(tmp_path / "no-nm"))
        with pytest.raises(ExecError):
            analyse(analyser, make_solution())


@requires_toolchain
class TestNoGlobalsWithRealNm:
    def _compiled(self, make_solution: Callable[..., Solution], source: str) -> Solution:
        solution = make_solution(source)
        subprocess.run(
            ["gcc", "-c", str(solution.src_file), "-o", str(solution.obj_file)],
            cwd=solution.path, check=True, capture_output=True,
        )
        return solution

    def test_file_scope_variable(self, make_solution: Callable[..., Solution]) -> None:
        solution = self._compiled(make_solution, "int x;\nint main(void) { return x; }\n")
        assert analyse(NoGlobalsAnalyser(penalty=-0.1), solution) is True

    def test_initialized_variable(self, make_solution: Callable[..., Solution]) -> None:
        solution = self._compiled(make_solution, "int x = 3;\nint main(void) { return x; }\n")
        assert analyse(NoGlobalsAnalyser(penalty=-0.1), solution) is True

    def test_locals_only(self, make_solution: Callable[..., Solution]) -> None:
        solution = self._compiled(
            make_solution,
            "int main(void) { static int calls = 1; int y = 2; return calls + y; }\n",
        )
        assert analyse(NoGlobalsAnalyser(penalty=-0.1), solution) is False


class TestAnalysisExecutor:
    def test_applies_penalties_of_firing_analysers(
        self, make_solution: Callable[..., Solution]
    ) -> None:
        solution = make_solution()
        solution.object_path.write_bytes(b"")
        solution.source = "int main() { exit(1); }"
        solution.included.append("stdio.h")
        solution.score = 2.0

        AnalysisExecutor([
            NoCallAnalyser(funs=("exit",), penalty=-0.25),
            NoHeaderAnalyser(header="string.h", penalty=-1.0),
        ]).execute(solution)

        assert solution.score == 1.75

    def test_skipped_without_object_file(self, make_solution: Callable[..., Solution]) -> None:
        solution = make_solution()
        solution.source = "int main() { exit(1); }"
        AnalysisExecutor([NoCallAnalyser(funs=("exit",), penalty=-0.25)]).execute(solution)
        assert solution.score == 0.0

    def test_errors_propagate(self, tmp_path: Path, make_solution: Callable[..., Solution]) -> None:
        solution = make_solution()
        solution.object_path.write_bytes(b"")
        executor = AnalysisExecutor([NoGlobalsAnalyser(penalty=-0.1, nm=str(tmp_path / "no-nm"))])
        with pytest.raises(ExecError):
            executor.execute(solution)
