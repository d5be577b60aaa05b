# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the config loader, the entry point for all config loading in AT-ST.

We test:
  1. Valid YAML loads into a frozen, correct config object
  2. Missing required fields raise ConfigValidationError
  3. Unknown fields raise ConfigValidationError (extra="forbid")
  4. Broken YAML and missing files raise ConfigLoadError
  5. Relative config paths are looked up in the project directory
"""

import textwrap
from pathlib import Path

import pytest
from pydantic import ValidationError

from atst.config.exceptions import ConfigError, ConfigLoadError, ConfigValidationError
from atst.config.loader import load_config, resolve_config_path

HELLO_PROJECT = Path(__file__).resolve().parents[1] / "projects" / "hello"


def _write(tmp_path: Path, content: str) -> Path:
    config_file = tmp_path / "config.yaml"
    config_file.write_text(textwrap.dedent(content), encoding="utf-8")
    return config_file


class TestLoadValidConfig:
    def test_loads_minimal_valid_config(self, tmp_config_file: Path) -> None:
        config = load_config(tmp_config_file)
        assert config.source == "proj.c"

    def test_defaults_are_populated(self, tmp_config_file: Path) -> None:
        config = load_config(tmp_config_file)
        assert config.compiler.cc == "gcc"
        assert config.compiler.cflags == ""
        assert config.compiler.ldflags == ""
        assert config.timeout == 5000
        assert config.command_timeout == 60000
        assert config.solutions.exclude_dirs == []
        assert config.tests == []
        assert config.analyses == []
        assert config.scripts == []

    def test_loads_full_config(self, tmp_path: Path) -> None:
        config_file = _write(tmp_path, """\
            source: proj.c
            solutions:
              exclude-dirs: [ tests, data ]
            compiler:
              CC: clang
              CFLAGS: -std=c99 -Wall
              LDFLAGS: -lm
            timeout: 1000
            command-timeout: 20000
            analyses:
              - analyser: no-call
                funs: [ exit, abort ]
                penalty: -0.2
              - analyser: no-header
                header: string.h
                penalty: -1.0
              - analyser: no-globals
                penalty: -0.1
            tests:
              - name: single line
                score: 1.0
                args: "3"
                stdin: |
                  line
                stdout: |
                  lin
            scripts: [ check.sh ]
        """)

        config = load_config(config_file)
        assert config.solutions.exclude_dirs == ["tests", "data"]
        assert config.compiler.cc == "clang"
        assert config.compiler.ldflags == "-lm"
        assert config.timeout == 1000
        assert config.command_timeout == 20000
        assert [a.analyser for a in config.analyses] == ["no-call", "no-header", "no-globals"]
        assert config.tests[0].stdin == "line\n"
        assert config.scripts == ["check.sh"]

    def test_loads_bundled_project_config(self) -> None:
        config = load_config(HELLO_PROJECT / "config.yaml")
        assert config.source == "main.c"
        assert len(config.tests) == 4
        assert config.timeout == 500

    def test_config_is_frozen(self, tmp_config_file: Path) -> None:
        config = load_config(tmp_config_file)
        with pytest.raises(ValidationError):
            config.source = "other.c"  # type: ignore[misc]


class TestLoadInvalidConfig:
    def test_missing_required_field_raises_validation_error(
        self, invalid_config_file: Path
    ) -> None:
        with pytest.raises(ConfigValidationError, match="source"):
            load_config(invalid_config_file)

    def test_unknown_field_raises_validation_error(self, tmp_path: Path) -> None:
        config_file = _write(tmp_path, """\
            source: proj.c
            optimise: true
        """)
        with pytest.raises(ConfigValidationError):
            load_config(config_file)

    def test_unsupported_analyser_raises_validation_error(self, tmp_path: Path) -> None:
        config_file = _write(tmp_path, """\
            source: proj.c
            analyses:
              - analyser: no-goto
                penalty: -1
        """)
        with pytest.raises(ConfigValidationError):
            load_config(config_file)

    def test_unquoted_number_expectation_raises_validation_error(self, tmp_path: Path) -> None:
        config_file = _write(tmp_path, """\
            source: proj.c
            tests:
              - name: price
                score: 1
                args: "0.10"
                stdout: 1.50
        """)
        with pytest.raises(ConfigValidationError, match="stdout"):
            load_config(config_file)

    def test_broken_yaml_raises_load_error(self, broken_yaml_file: Path) -> None:
        with pytest.raises(ConfigLoadError, match="Invalid YAML"):
            load_config(broken_yaml_file)

    def test_missing_file_raises_load_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError, match="not found"):
            load_config(tmp_path / "nope.yaml")

    def test_directory_raises_load_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError, match="not a file"):
            load_config(tmp_path)

    def test_non_mapping_raises_load_error(self, tmp_path: Path) -> None:
        config_file = _write(tmp_path, "- just\n- a list\n")
        with pytest.raises(ConfigLoadError, match="mapping"):
            load_config(config_file)

    def test_errors_share_a_base_class(self, broken_yaml_file: Path) -> None:
        with pytest.raises(ConfigError):
            load_config(broken_yaml_file)


class TestResolveConfigPath:
    def test_relative_path_is_inside_project(self, tmp_path: Path) -> None:
        assert resolve_config_path(tmp_path, Path("config.yaml")) == tmp_path / "config.yaml"

    def test_absolute_path_is_kept(self, tmp_path: Path) -> None:
        absolute = tmp_path / "elsewhere" / "config.yaml"
        assert resolve_config_path(Path("project"), absolute) == absolute
