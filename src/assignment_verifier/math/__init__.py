"""Load-dispersion math used by verification reports."""

from .gini import Gini
from .statistics import Statistics

__all__ = ["Gini", "Statistics"]
