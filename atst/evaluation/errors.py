# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Errors raised while evaluating a solution.

Only conditions that make the evaluation itself untrustworthy are errors.
A solution that doesn't compile, crashes, hangs or prints the wrong thing is
a normal outcome that simply scores less; none of that ends up here.
"""


class EvaluationError(Exception):
    """Base for everything a pipeline module may raise."""


class ExecError(EvaluationError):
    """A required external tool (compiler, preprocessor, nm, a script) could not be run."""

    def __init__(self, command: str) -> None:
        super().__init__(f"error executing '{command}' (not installed?)")
        self.command = command


class InternalError(EvaluationError):
    """A local invariant broke: bad regex, unreadable pipe, undecodable tool output."""

    def __init__(self, msg: str) -> None:
        super().__init__(f"Internal error: {msg}")
        self.msg = msg


class SolutionExecError(EvaluationError):
    """The solution's own binary could not be spawned or talked to."""

    def __init__(self, msg: str) -> None:
        super().__init__(f"solution execution error: {msg}")
        self.msg = msg
