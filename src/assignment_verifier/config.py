"""Configuration loading and management for Assignment Verifier.

Configuration sources are merged in priority order:
    1. Defaults (defined in VerifierConfig)
    2. Global config (~/.assignment-verifier.toml)
    3. Project config (./assignment-verifier.toml)
    4. Explicit config file
    5. Environment variables (ASSIGNMENT_VERIFIER_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(detail=True, output_format="text")
    >>> config.detail
    True
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from .exceptions import AssignmentVerifierError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]
OutputFormat = Literal["rich", "text", "json"]

ENV_PREFIX = "ASSIGNMENT_VERIFIER_"
CONFIG_FILENAME = "assignment-verifier.toml"

_OUTPUT_FORMATS = ("rich", "text", "json")
_VERBOSITIES = ("quiet", "normal", "verbose")


@dataclass(frozen=True)
class VerifierConfig:
    """Configuration for verification runs and report rendering.

    Attributes:
        Rendering:
            detail: List individual shards and hosts under each count
            output_format: One of rich, text, json
            locality_precision: Decimal places for locality percentages
            hosts_per_line: Hosts printed per line in detail mode

        Logging:
            verbosity: quiet, normal or verbose

        Gates (CLI exit status):
            fail_on_non_favored: Fail when any shard runs off its preferred hosts
            min_compliance_percent: Fail when compliant shards fall below this share
    """

    # Rendering
    detail: bool = False
    output_format: OutputFormat = "rich"
    locality_precision: int = 2
    hosts_per_line: int = 3

    # Logging
    verbosity: Verbosity = "normal"

    # Gates
    fail_on_non_favored: bool = False
    min_compliance_percent: Optional[float] = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.output_format not in _OUTPUT_FORMATS:
            raise InvalidConfigError(
                "output_format", self.output_format, f"must be one of {', '.join(_OUTPUT_FORMATS)}"
            )
        if self.verbosity not in _VERBOSITIES:
            raise InvalidConfigError(
                "verbosity", self.verbosity, f"must be one of {', '.join(_VERBOSITIES)}"
            )
        if not 0 <= self.locality_precision <= 6:
            raise InvalidConfigError(
                "locality_precision", self.locality_precision, "must be between 0 and 6"
            )
        if self.hosts_per_line < 1:
            raise InvalidConfigError("hosts_per_line", self.hosts_per_line, "must be at least 1")
        if self.min_compliance_percent is not None and not (
            0.0 <= self.min_compliance_percent <= 100.0
        ):
            raise InvalidConfigError(
                "min_compliance_percent",
                self.min_compliance_percent,
                "must be between 0 and 100",
            )


DEFAULT_CONFIG = VerifierConfig()


def load_config(config_file: Optional[Path] = None, **overrides) -> VerifierConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``None``
            values are ignored so unset CLI options keep lower-priority values.

    Returns:
        Validated VerifierConfig instance

    Raises:
        AssignmentVerifierError: If a config file is invalid or missing
        InvalidConfigError: If a value fails validation
    """
    merged: dict = {}

    global_config = Path.home() / f".{CONFIG_FILENAME}"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except AssignmentVerifierError:
            raise
        except Exception as e:
            raise AssignmentVerifierError(f"Invalid global config '{global_config}': {e}")

    project_config = Path.cwd() / CONFIG_FILENAME
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except AssignmentVerifierError:
            raise
        except Exception as e:
            raise AssignmentVerifierError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise AssignmentVerifierError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except AssignmentVerifierError:
            raise
        except Exception as e:
            raise AssignmentVerifierError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    # Convert verbosity boolean flags to string
    if overrides.pop("verbose", False):
        overrides["verbosity"] = "verbose"
    if overrides.pop("quiet", False):
        overrides["verbosity"] = "quiet"

    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return VerifierConfig(**merged)
    except TypeError as e:
        raise AssignmentVerifierError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Collect overrides from ``ASSIGNMENT_VERIFIER_<FIELD>`` variables.

    Only variables that are set and map to a settable field are returned.
    """
    type_hints = get_type_hints(VerifierConfig)

    result: dict[str, Any] = {}

    for field_name in VerifierConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
            if parsed is not None:
                result[field_name] = parsed
        except ValueError as e:
            raise AssignmentVerifierError(f"Invalid {env_key}: {e}")

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Convert one ``ASSIGNMENT_VERIFIER_*`` string to its field's type.

    Returns None for field types that cannot be set from the environment,
    in which case the variable is ignored.

    Raises:
        ValueError: For a boolean or number that does not parse
    """
    # Unwrap Optional[...] to the concrete field type
    members = getattr(type_hint, "__args__", ())
    if type(None) in members:
        type_hint = next(t for t in members if t is not type(None))

    if type_hint is bool:
        flag = value.strip().lower()
        if flag in ("true", "1", "yes", "on"):
            return True
        if flag in ("false", "0", "no", "off"):
            return False
        raise ValueError(f"expected a boolean, got '{value}'")
    if type_hint is int:
        return int(value)
    if type_hint is float:
        return float(value)
    if type_hint is str or getattr(type_hint, "__origin__", None) is Literal:
        return value
    return None


def _load_toml_file(path: Path) -> dict:
    """Read one config file; only top-level keys are used."""
    with open(path, "rb") as f:
        return tomllib.load(f)
