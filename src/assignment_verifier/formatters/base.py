"""Base formatter interface for verification report rendering."""

import logging
from abc import ABC, abstractmethod
from typing import List

from ..config import VerifierConfig
from ..report import VerificationReport

logger = logging.getLogger(__name__)


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def render(self, reports: List[VerificationReport], config: VerifierConfig) -> None:
        """Write reports to stdout."""

    @abstractmethod
    def format(self, reports: List[VerificationReport], config: VerifierConfig) -> str:
        """Return formatted string representation of reports."""

    @staticmethod
    def check_filled(report: VerificationReport) -> None:
        if not report.filled:
            logger.error(
                "Assignment verification report for table '%s' hasn't been filled up",
                report.table_name,
            )


def format_percent(value: float, precision: int) -> str:
    """Format with at most ``precision`` decimals, dropping trailing zeros."""
    text = f"{value:.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
