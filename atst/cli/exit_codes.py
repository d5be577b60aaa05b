# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI exit codes.

These are the only exit codes the CLI uses. Scripts grading a whole class
can rely on them to tell a broken config from a broken toolchain.
"""

SUCCESS: int = 0
USER_ERROR: int = 1
CONFIG_ERROR: int = 2
RUNTIME_ERROR: int = 3
# Only with --keep-going: the run finished but some solutions could not be evaluated.
EVALUATION_FAILURES: int = 4
