# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schema for an AT-ST project.

A project is a directory holding one sub-directory per student solution plus
a YAML file describing how every solution gets built, tested and analysed.
Every section of that file gets its own frozen pydantic model. Frozen means
once you create it, you cannot mutate it: the same config object is shared
by every module for every solution in the batch.

The models use pydantic v2's ConfigDict with:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked
  - populate_by_name=True: the YAML uses hyphenated keys (`exclude-dirs`),
    Python code can use the field names

Example:

    source: proj.c
    compiler:
      CFLAGS: -std=c99 -Wall -Wextra
    analyses:
      - analyser: no-call
        funs: [ exit ]
        penalty: -0.2
    tests:
      - name: single line
        score: 1.0
        args: "3"
        stdin: |
          line
        stdout: |
          lin
"""

from pathlib import PurePosixPath
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_TEST_TIMEOUT_MS = 5000
DEFAULT_COMMAND_TIMEOUT_MS = 60000

_MODEL_CONFIG = ConfigDict(
    frozen=True, extra="forbid", validate_default=True, populate_by_name=True,
)


class SolutionsConfig(BaseModel):
    """Which sub-directories of the project are not solutions."""

    model_config = _MODEL_CONFIG

    exclude_dirs: list[str] = Field(
        default_factory=list,
        alias="exclude-dirs",
        description="Directory names skipped during solution discovery",
    )


class CompilerConfig(BaseModel):
    """The C compiler and the flags used to build every solution."""

    model_config = _MODEL_CONFIG

    cc: str = Field(default="gcc", alias="CC", min_length=1, description="Compiler executable")
    cflags: str = Field(default="", alias="CFLAGS", description="Space-separated compile flags")
    ldflags: str = Field(default="", alias="LDFLAGS", description="Space-separated link flags")


class NoCallAnalysisConfig(BaseModel):
    """Penalise calls of any of the listed functions."""

    model_config = _MODEL_CONFIG

    analyser: Literal["no-call"]
    funs: list[str] = Field(min_length=1, description="Disallowed function names")
    penalty: float


class NoHeaderAnalysisConfig(BaseModel):
    """Penalise including the given system header."""

    model_config = _MODEL_CONFIG

    analyser: Literal["no-header"]
    header: str = Field(min_length=1)
    penalty: float


class NoGlobalsAnalysisConfig(BaseModel):
    """Penalise global variables."""

    model_config = _MODEL_CONFIG

    analyser: Literal["no-globals"]
    penalty: float


AnalysisConfig = Annotated[
    Union[NoCallAnalysisConfig, NoHeaderAnalysisConfig, NoGlobalsAnalysisConfig],
    Field(discriminator="analyser"),
]


class TestCaseConfig(BaseModel):
    """
    One invocation of the solution's binary.

    `args` is either a whitespace-separated string or a list of strings.
    Values that look like numbers must be quoted (`stdout: "1.50"`): YAML
    would read them as numbers and lose the exact text, so they are rejected.
    `stdin`, `stdout` and `stderr` hold literal text, or `<file` to read the
    text from a file in the project directory. `stdout: "*"` only requires
    some output.
    """

    __test__ = False

    model_config = _MODEL_CONFIG

    args: Union[str, list[str]] = Field(default="")
    stdin: Optional[str] = None
    stdout: Optional[str] = None
    stderr: Optional[str] = None
    case_insensitive: bool = Field(default=False, alias="case-insensitive")

    def arg_list(self) -> list[str]:
        if isinstance(self.args, str):
            return self.args.split()
        return list(self.args)


class TestConfig(BaseModel):
    """
    A named, scored test. Either the case fields are given inline (a test
    with a single case) or the test lists its cases under `test-cases`.
    """

    __test__ = False

    model_config = _MODEL_CONFIG

    name: str = Field(min_length=1)
    score: float
    requirement: Literal["all", "any"] = Field(
        default="all",
        description="'all': every case must pass, 'any': one passing case is enough",
    )

    args: Optional[Union[str, list[str]]] = None
    stdin: Optional[str] = None
    stdout: Optional[str] = None
    stderr: Optional[str] = None
    case_insensitive: Optional[bool] = Field(default=None, alias="case-insensitive")

    test_cases: Optional[list[TestCaseConfig]] = Field(
        default=None, alias="test-cases", min_length=1,
    )

    @field_validator("requirement", mode="before")
    @classmethod
    def _lowercase_requirement(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    @model_validator(mode="after")
    def _inline_or_list(self) -> "TestConfig":
        inline = [
            self.args, self.stdin, self.stdout, self.stderr,
        ]
        if self.test_cases is not None and any(v is not None for v in inline):
            raise ValueError(
                f"test '{self.name}' mixes inline case fields with 'test-cases'"
            )
        return self

    def cases(self) -> list[TestCaseConfig]:
        """The configured cases, turning inline fields into a single case."""
        if self.test_cases is not None:
            if self.case_insensitive is None:
                return list(self.test_cases)
            # A test-level flag is the default for cases that don't set their own.
            return [
                case if "case_insensitive" in case.model_fields_set
                else case.model_copy(update={"case_insensitive": self.case_insensitive})
                for case in self.test_cases
            ]
        return [
            TestCaseConfig(
                args=self.args if self.args is not None else "",
                stdin=self.stdin,
                stdout=self.stdout,
                stderr=self.stderr,
                case_insensitive=bool(self.case_insensitive),
            )
        ]


class ProjectConfig(BaseModel):
    """
    Top-level config container for a project.

    Only `source` is mandatory. A config with nothing else compiles every
    solution and awards nothing, which is still useful to check that all
    solutions build.
    """

    model_config = _MODEL_CONFIG

    source: str = Field(min_length=1, description="Source file name inside every solution")
    solutions: SolutionsConfig = Field(default_factory=SolutionsConfig)
    compiler: CompilerConfig = Field(default_factory=CompilerConfig)
    timeout: int = Field(
        default=DEFAULT_TEST_TIMEOUT_MS,
        gt=0,
        description="Wall-clock limit of a single test case in milliseconds",
    )
    command_timeout: int = Field(
        default=DEFAULT_COMMAND_TIMEOUT_MS,
        gt=0,
        alias="command-timeout",
        description="Wall-clock limit of compiler, preprocessor, nm and scripts in milliseconds",
    )
    analyses: list[AnalysisConfig] = Field(default_factory=list)
    tests: list[TestConfig] = Field(default_factory=list)
    scripts: list[str] = Field(
        default_factory=list,
        description="Extension scripts, relative to the project directory",
    )

    @field_validator("source")
    @classmethod
    def _relative_source(cls, value: str) -> str:
        path = PurePosixPath(value)
        if path.is_absolute() or ".." in path.parts or path.name in ("", "."):
            raise ValueError(
                f"'source' must be a file path inside the solution directory, got '{value}'"
            )
        return value
