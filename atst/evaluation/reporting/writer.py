# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Results report writer.

Writes the outcome of a run as one JSON document:

    {
      "scores": {"alice": 3.8, "carol": 0.0},
      "failures": {"dave": "error executing 'nm' (not installed?)"},
      "skipped": ["bob"],
      "summary": {"evaluated": 2, "failed": 1, "skipped": 1, "average_score": 1.9}
    }

Keys are sorted so two runs over the same solutions produce identical files.
"""

import json
from pathlib import Path

from atst.evaluation.models import BatchResult
from atst.logging.logger import get_logger
from atst.utils.filesystem import atomic_write

logger = get_logger(__name__)


def build_report(result: BatchResult) -> dict[str, object]:
    scores = result.scores
    average = sum(scores.values()) / len(scores) if scores else 0.0
    return {
        "scores": dict(sorted(scores.items())),
        "failures": dict(sorted(result.failures.items())),
        "skipped": sorted(result.skipped),
        "summary": {
            "evaluated": len(scores),
            "failed": len(result.failures),
            "skipped": len(result.skipped),
            "average_score": round(average, 4),
        },
    }


def write_report(result: BatchResult, output_path: Path) -> Path:
    """Write the JSON report atomically and return its path."""
    atomic_write(
        output_path,
        json.dumps(build_report(result), indent=2, sort_keys=True) + "\n",
    )
    logger.info("Results report written", extra={"output": str(output_path)})
    return output_path
