# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Analysis module: applies the penalty of every analyser that fires."""

from typing import Sequence

from atst.evaluation.analysers import Analyser, analyse
from atst.evaluation.models import Solution
from atst.evaluation.modules.base import Module
from atst.logging.logger import get_logger

logger = get_logger(__name__)


class AnalysisExecutor(Module):
    """
    Run the configured analysers in order.

    Solutions that didn't compile are left alone, so a submission that
    never built can't end up below zero.
    """

    name = "analyses"

    def __init__(self, analysers: Sequence[Analyser]) -> None:
        self._analysers = tuple(analysers)

    def execute(self, solution: Solution) -> None:
        if not solution.object_path.is_file():
            logger.info("No object file, skipping analyses", extra={"solution": solution.name})
            return

        for analyser in self._analysers:
            if analyse(analyser, solution):
                solution.score += analyser.penalty
                logger.info(
                    "Analyser penalty applied",
                    extra={
                        "solution": solution.name,
                        "analyser": analyser.kind,
                        "penalty": analyser.penalty,
                    },
                )

    def __repr__(self) -> str:
        return f"AnalysisExecutor(analysers={[a.kind for a in self._analysers]})"
