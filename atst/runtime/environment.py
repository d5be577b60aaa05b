# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Environment validation for AT-ST.

Checks that the machine can actually grade solutions before we start. A
missing compiler would otherwise only show up as an error on the first
solution, after the config has been loaded and the run has been announced.
"""

import platform
import shutil
import sys
from typing import NamedTuple

MINIMUM_PYTHON_MAJOR = 3
MINIMUM_PYTHON_MINOR = 11

# External tools the built-in modules call.
REQUIRED_TOOLS: tuple[str, ...] = ("dos2unix", "nm")


class SystemInfo(NamedTuple):
    """Snapshot of the current system environment."""

    python_version: str
    platform: str
    architecture: str
    hostname: str


def get_python_version() -> tuple[int, int, int]:
    """Return the current Python version as a (major, minor, micro) tuple."""
    return sys.version_info[:3]


def check_minimum_python() -> None:
    """
    Verify we're running Python 3.11+.

    Raises:
        RuntimeError: If Python version is below 3.11.
    """
    major, minor, _ = get_python_version()
    if major < MINIMUM_PYTHON_MAJOR or (
        major == MINIMUM_PYTHON_MAJOR and minor < MINIMUM_PYTHON_MINOR
    ):
        raise RuntimeError(
            f"AT-ST requires Python >= {MINIMUM_PYTHON_MAJOR}.{MINIMUM_PYTHON_MINOR}, "
            f"but you're running {major}.{minor}. Please upgrade."
        )


def get_system_info() -> SystemInfo:
    """Collect basic system information for logging and diagnostics."""
    return SystemInfo(
        python_version=platform.python_version(),
        platform=platform.system(),
        architecture=platform.machine(),
        hostname=platform.node(),
    )


def find_tools(compiler: str = "gcc") -> dict[str, str | None]:
    """Where each external tool lives on PATH, None for the missing ones."""
    return {tool: shutil.which(tool) for tool in (compiler, *REQUIRED_TOOLS)}


def missing_tools(compiler: str = "gcc") -> list[str]:
    return [tool for tool, path in find_tools(compiler).items() if path is None]
