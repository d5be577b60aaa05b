# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Pipeline modules.

Each module is one step of evaluating a solution, applied in this order:
  - compiler: build the object file and the binary, penalise warnings
  - parser: collect included headers and the preprocessed source
  - runner: run the configured tests and award their scores
  - analysis: apply the static analysers' penalties
  - script: run an extension script and apply the score it reports
"""

from atst.evaluation.modules.analysis import AnalysisExecutor
from atst.evaluation.modules.base import Module
from atst.evaluation.modules.compiler import Compiler
from atst.evaluation.modules.parser import Parser
from atst.evaluation.modules.runner import TestExecutor
from atst.evaluation.modules.script import ScriptExecutor

__all__ = [
    "AnalysisExecutor",
    "Compiler",
    "Module",
    "Parser",
    "ScriptExecutor",
    "TestExecutor",
]
