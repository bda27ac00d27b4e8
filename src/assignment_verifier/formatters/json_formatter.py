"""JSON formatter for verification reports."""

import json
from typing import List

from ..config import VerifierConfig
from ..report import VerificationReport
from .base import BaseFormatter


class JsonFormatter(BaseFormatter):
    """Render reports as a JSON array."""

    def render(self, reports: List[VerificationReport], config: VerifierConfig) -> None:
        print(self.format(reports, config))

    def format(self, reports: List[VerificationReport], config: VerifierConfig) -> str:
        for report in reports:
            self.check_filled(report)
        return json.dumps([r.to_dict() for r in reports], indent=2)
