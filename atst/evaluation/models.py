# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Data models for the evaluation pipeline.

Tests, test cases and command results are frozen dataclasses: they are built
once from the config and shared by every solution. The Solution record is
the one deliberately mutable type. Modules run one after another and each of
them fills in facts or adjusts the score of the solution they are handed.
"""

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

# Expected output that only requires the stream to be non-empty.
ANY_OUTPUT = "*"


class Requirement(enum.Enum):
    """When a test's score is awarded."""

    ALL = "all"
    ANY = "any"

    def is_met(self, cases_passed: int, total_cases: int) -> bool:
        if self is Requirement.ALL:
            return cases_passed == total_cases
        return cases_passed >= 1


@dataclass(frozen=True)
class TestCase:
    """
    One invocation of a solution's binary with its expected behaviour.

    An expectation left as None is not checked at all.
    """

    __test__ = False

    args: tuple[str, ...] = ()
    stdin: Optional[str] = None
    stdout: Optional[str] = None
    stderr: Optional[str] = None
    case_insensitive: bool = False


@dataclass(frozen=True)
class Test:
    """
    A named, scored group of test cases.

    The score is all-or-nothing: the requirement decides whether enough
    cases passed, there is no partial credit.
    """

    __test__ = False

    name: str
    score: float
    cases: tuple[TestCase, ...]
    requirement: Requirement = Requirement.ALL


@dataclass
class Solution:
    """
    One student submission under evaluation.

    `path` is the solution directory, the file names are relative to it.
    `included` and `source` are filled in by the parser module, `score` is
    only ever adjusted by modules and never reset.
    """

    path: Path
    src_file: Path
    obj_file: Path
    bin_file: Path

    included: list[str] = field(default_factory=list)
    source: str = ""

    score: float = 0.0

    @classmethod
    def for_directory(cls, path: Path, src_file: str) -> "Solution":
        """Derive the artifact names from the source: proj.c -> proj.o, proj."""
        src = Path(src_file)
        return cls(
            path=path,
            src_file=src,
            obj_file=src.with_suffix(".o"),
            bin_file=Path(src.stem),
        )

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def source_path(self) -> Path:
        return self.path / self.src_file

    @property
    def object_path(self) -> Path:
        return self.path / self.obj_file

    @property
    def binary_path(self) -> Path:
        return self.path / self.bin_file


@dataclass(frozen=True)
class CommandResult:
    """What came back from running an external command."""

    args: tuple[str, ...]
    returncode: int
    stdout: bytes
    stderr: bytes
    timed_out: bool
    elapsed_seconds: float

    @property
    def success(self) -> bool:
        return not self.timed_out and self.returncode == 0


@dataclass
class BatchResult:
    """
    Outcome of evaluating a batch without stopping at the first error.

    Solutions whose evaluation broke are listed in `failures` (name -> error
    message) and never appear in `scores`, so a failure is never mistaken for
    a zero.
    """

    scores: dict[str, float] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures
