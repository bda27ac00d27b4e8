"""Descriptive statistics over per-host load counts."""

from typing import Sequence

import numpy as np


class Statistics:
    """Statistical summaries of shard distribution."""

    @staticmethod
    def mean(values: Sequence[float]) -> float:
        """Compute arithmetic mean."""
        if len(values) == 0:
            return 0.0
        return float(np.mean(np.asarray(values, dtype=float)))

    @staticmethod
    def stdev(values: Sequence[float]) -> float:
        """Compute sample standard deviation."""
        if len(values) < 2:
            return 0.0
        return float(np.std(np.asarray(values, dtype=float), ddof=1))

    @staticmethod
    def coefficient_of_variation(values: Sequence[float]) -> float:
        """CV = stdev / mean; 0 when the mean is 0."""
        mean_val = Statistics.mean(values)
        if mean_val == 0:
            return 0.0
        return Statistics.stdev(values) / mean_val
