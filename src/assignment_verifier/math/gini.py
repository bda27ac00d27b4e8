"""Inequality of shards-per-host counts.

A table whose shards sit evenly on its hosting servers scores 0; one whose
every shard lands on a single server approaches 1. Values are sorted
ascending and weighted by position:

    G = 2 * sum(i * x_i) / (n * sum(x_i)) - (n + 1) / n,   i = 1..n
"""

from typing import Sequence, Union


class Gini:
    """Load-inequality score for a set of per-host shard counts."""

    @staticmethod
    def gini_coefficient(
        values: Union[Sequence[float], Sequence[int]],
        bias_correction: bool = True,
    ) -> float:
        """Score how unevenly ``values`` are spread.

        Args:
            values: Shard counts, one per host; must be non-empty and >= 0
            bias_correction: Scale by n / (n - 1) so a single overloaded
                host out of n scores 1 rather than (n - 1) / n

        Returns:
            A score clamped to [0, 1]; 0 for one host or an all-zero load.

        Raises:
            ValueError: On an empty sequence or a negative count.
        """
        if not values:
            raise ValueError("no host loads to score")

        if len(values) == 1:
            return 0.0

        if any(v < 0 for v in values):
            raise ValueError("host loads must be non-negative")

        total = sum(values)
        if total == 0:
            return 0.0

        ordered = sorted(values)
        n = len(ordered)

        weighted = sum(rank * v for rank, v in enumerate(ordered, start=1))
        gini = (2.0 * weighted) / (n * total) - (n + 1.0) / n

        if bias_correction:
            gini *= n / (n - 1)

        return max(0.0, min(1.0, gini))
