# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Human-readable progress on stdout.

This is the one place that writes plain text to stdout: a line per solution
as soon as its score is final, and in verbose mode a line per test and per
script. Diagnostics go through the JSON logger on stderr instead.

    alice: 3.8
    bob: no source found
    carol: 0.0
"""

import math
import sys
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, TextIO


def format_score(score: float) -> str:
    """
    Round to two places, halves away from zero (0.125 -> 0.13).

    The hundredths are rounded exactly through Decimal, since the builtin
    round() sends halves to the even neighbour. `+ 0.0` turns -0.0 into 0.0.
    """
    if not math.isfinite(score):
        return str(score)
    hundredths = Decimal(score * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return str(float(hundredths) / 100 + 0.0)


class ProgressReporter:
    """Writes progress lines to a text stream (stdout by default)."""

    def __init__(self, stream: Optional[TextIO] = None, verbose: bool = False) -> None:
        self._stream = stream
        self.verbose = verbose

    def _write(self, line: str) -> None:
        stream = self._stream if self._stream is not None else sys.stdout
        stream.write(line + "\n")
        stream.flush()

    def solution_started(self, solution: str) -> None:
        if self.verbose:
            self._write(f"{solution}:")

    def test_finished(self, solution: str, test: str, passed: bool) -> None:
        if self.verbose:
            self._write(f"  {test}: {'passed' if passed else 'failed'}")

    def script_started(self, solution: str, script: str) -> None:
        if self.verbose:
            self._write(f"  {script}")

    def solution_finished(self, solution: str, score: float) -> None:
        self._write(f"{solution}: {format_score(score)}")

    def solution_skipped(self, solution: str) -> None:
        self._write(f"{solution}: no source found")

    def solution_failed(self, solution: str, error: str) -> None:
        self._write(f"{solution}: FAILED ({error})")
