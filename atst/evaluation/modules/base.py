# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Abstract base class for pipeline modules.

Contract:
    execute(solution) -> None

A module reads what earlier modules left on the Solution, adds its own
facts, and adjusts `solution.score`. Expected outcomes such as a compile
failure or a failing test are not errors: the module just returns. Anything
that makes the evaluation unreliable raises an EvaluationError, which stops
the pipeline.

Modules capture their configuration at construction time and keep no state
between solutions, so one instance serves the whole batch.
"""

from abc import ABC, abstractmethod

from atst.evaluation.models import Solution


class Module(ABC):
    """Base class for all pipeline modules."""

    name: str = "module"

    @abstractmethod
    def execute(self, solution: Solution) -> None:
        """
        Apply this module to one solution.

        Raises:
            EvaluationError: The module could not do its job.
        """
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
