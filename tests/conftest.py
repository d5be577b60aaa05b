# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for AT-ST tests.

Fixtures here are available to every test file automatically. Most module
tests don't need a real toolchain: a tiny shell script can stand in for a
compiled solution, for nm, or for the preprocessor.
"""

import textwrap
from pathlib import Path
from typing import Callable, Optional

import pytest

from atst.evaluation.models import Solution


@pytest.fixture()
def make_executable() -> Callable[[Path, str], Path]:
    """Write a /bin/sh script to `path` and make it executable."""

    def _make(path: Path, body: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("#!/bin/sh\n" + textwrap.dedent(body), encoding="utf-8")
        path.chmod(0o755)
        return path

    return _make


@pytest.fixture()
def make_solution(tmp_path: Path) -> Callable[..., Solution]:
    """
    Create a solution directory under tmp_path.

    The source file is `proj.c`, so the object file is `proj.o` and the
    binary `proj`. Pass `source=None` to leave the source file out.
    """

    def _make(source: Optional[str] = "int main(void) { return 0; }\n", name: str = "alice") -> Solution:
        solution_dir = tmp_path / name
        solution_dir.mkdir(parents=True, exist_ok=True)
        if source is not None:
            (solution_dir / "proj.c").write_text(source, encoding="utf-8")
        return Solution.for_directory(solution_dir, "proj.c")

    return _make


@pytest.fixture()
def tmp_config_file(tmp_path: Path) -> Path:
    """The smallest config that passes schema validation."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text("source: proj.c\n", encoding="utf-8")
    return config_file


@pytest.fixture()
def invalid_config_file(tmp_path: Path) -> Path:
    """A config file that's valid YAML but fails schema validation (missing `source`)."""
    config_content = textwrap.dedent("""\
        compiler:
          CC: gcc
    """)
    config_file = tmp_path / "invalid_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    """A file that isn't valid YAML at all."""
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return config_file
