"""Shared CLI helpers."""

from pathlib import Path
from typing import List, Optional

from rich.console import Console

from ..config import VerifierConfig, load_config
from ..report import VerificationReport

console = Console()
err_console = Console(stderr=True)


def resolve_config(
    config: Optional[Path] = None,
    detail: bool = False,
    fmt: Optional[str] = None,
    fail_on_non_favored: bool = False,
    min_compliance: Optional[float] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> VerifierConfig:
    """Build configuration from CLI options.

    Boolean flags only switch features on; leaving them off keeps whatever
    the config files say.
    """
    overrides = {
        "output_format": fmt,
        "min_compliance_percent": min_compliance,
        "verbose": verbose,
        "quiet": quiet,
    }
    if detail:
        overrides["detail"] = True
    if fail_on_non_favored:
        overrides["fail_on_non_favored"] = True
    return load_config(config_file=config, **overrides)


def check_gates(reports: List[VerificationReport], config: VerifierConfig) -> List[str]:
    """Return one message per failed CI gate."""
    failures: List[str] = []
    for report in reports:
        if config.fail_on_non_favored and report.non_favored:
            failures.append(
                f"{report.table_name}: {len(report.non_favored)} shards NOT on favored hosts"
            )
        if (
            config.min_compliance_percent is not None
            and report.compliance_percent < config.min_compliance_percent
        ):
            failures.append(
                f"{report.table_name}: compliance {report.compliance_percent:.1f}% "
                f"below {config.min_compliance_percent:.1f}%"
            )
    return failures
