"""Accuracy gate applied to raw fixes before any smoothing."""

from __future__ import annotations

from typing import Iterable, List

from ..config import ACCURACY_THRESHOLD_M
from ..models import Fix


def passes_accuracy(fix: Fix, threshold_m: float = ACCURACY_THRESHOLD_M) -> bool:
    """Return True when the fix has no accuracy radius or one below the threshold."""

    if fix.accuracy is None:
        return True
    return fix.accuracy < threshold_m


def filter_by_accuracy(
    fixes: Iterable[Fix], threshold_m: float = ACCURACY_THRESHOLD_M
) -> List[Fix]:
    """Return the fixes whose reported accuracy is absent or strictly below ``threshold_m``.

    This is a binary gate: inaccurate fixes are removed outright rather than
    down-weighted.
    """

    return [fix for fix in fixes if passes_accuracy(fix, threshold_m)]


__all__ = ["filter_by_accuracy", "passes_accuracy"]
