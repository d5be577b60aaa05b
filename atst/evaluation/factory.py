# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Factory functions that turn a validated ProjectConfig into pipeline modules.

The config models describe what the YAML looks like. The objects built here
are what the pipeline works with: tests with their file references already
read, analysers with their tools and timeouts filled in, and the modules in
their fixed order.
"""

from pathlib import Path
from typing import Optional

from atst.config.exceptions import ConfigLoadError
from atst.config.schema import (
    NoCallAnalysisConfig,
    NoGlobalsAnalysisConfig,
    NoHeaderAnalysisConfig,
    ProjectConfig,
    TestCaseConfig,
)
from atst.evaluation.analysers import (
    Analyser,
    NoCallAnalyser,
    NoGlobalsAnalyser,
    NoHeaderAnalyser,
)
from atst.evaluation.models import Requirement, Test, TestCase
from atst.evaluation.modules import (
    AnalysisExecutor,
    Compiler,
    Module,
    Parser,
    ScriptExecutor,
    TestExecutor,
)
from atst.evaluation.reporting.progress import ProgressReporter
from atst.utils.filesystem import read_text_lossy

# `stdin: <input` reads the text from the file `input` in the project directory.
FILE_REFERENCE_PREFIX = "<"


def _resolve_text(value: Optional[str], project_dir: Path) -> Optional[str]:
    if value is None or not value.startswith(FILE_REFERENCE_PREFIX):
        return value

    reference = project_dir / value[len(FILE_REFERENCE_PREFIX):].strip()
    try:
        return read_text_lossy(reference)
    except OSError as err:
        raise ConfigLoadError(f"Cannot read file referenced as '{value}': {err}") from err


def _build_case(case: TestCaseConfig, project_dir: Path) -> TestCase:
    return TestCase(
        args=tuple(case.arg_list()),
        stdin=_resolve_text(case.stdin, project_dir),
        stdout=_resolve_text(case.stdout, project_dir),
        stderr=_resolve_text(case.stderr, project_dir),
        case_insensitive=case.case_insensitive,
    )


def build_tests(config: ProjectConfig, project_dir: Path) -> list[Test]:
    """
    Build the tests in configured order.

    Raises:
        ConfigLoadError: A `<file` reference points to an unreadable file.
    """
    return [
        Test(
            name=test.name,
            score=test.score,
            cases=tuple(_build_case(case, project_dir) for case in test.cases()),
            requirement=Requirement(test.requirement),
        )
        for test in config.tests
    ]


def build_analysers(config: ProjectConfig) -> list[Analyser]:
    """Build the analysers in configured order."""
    analysers: list[Analyser] = []
    for analysis in config.analyses:
        if isinstance(analysis, NoCallAnalysisConfig):
            analysers.append(NoCallAnalyser(funs=tuple(analysis.funs), penalty=analysis.penalty))
        elif isinstance(analysis, NoHeaderAnalysisConfig):
            analysers.append(NoHeaderAnalyser(header=analysis.header, penalty=analysis.penalty))
        elif isinstance(analysis, NoGlobalsAnalysisConfig):
            analysers.append(
                NoGlobalsAnalyser(penalty=analysis.penalty, timeout_ms=config.command_timeout)
            )
    return analysers


def build_modules(
    config: ProjectConfig,
    project_dir: Path,
    reporter: Optional[ProgressReporter] = None,
) -> list[Module]:
    """
    Build every module in the order they run:
    compiler, parser, tests, analyses, then one module per script.
    """
    compiler = config.compiler
    modules: list[Module] = [
        Compiler(
            cc=compiler.cc,
            cflags=compiler.cflags,
            ldflags=compiler.ldflags,
            timeout_ms=config.command_timeout,
        ),
        Parser(cc=compiler.cc, timeout_ms=config.command_timeout),
        TestExecutor(build_tests(config, project_dir), config.timeout, reporter=reporter),
        AnalysisExecutor(build_analysers(config)),
    ]
    for script in config.scripts:
        modules.append(
            ScriptExecutor(
                (project_dir / script).resolve(),
                timeout_ms=config.command_timeout,
                reporter=reporter,
            )
        )
    return modules
