"""
Formatter configuration.

FormatterConfig holds the few knobs the formatting engine has. Values
are resolved from explicit overrides, then DTABLE_* environment
variables, then defaults.
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .schema.types import DateFormat

log = logging.getLogger(__name__)

ENV_PREFIX = "DTABLE_"

DEFAULT_ROW_ID_FIELD = "_id"

# environment names that differ from field names
ENV_ALIASES = {"date_format": "default_date_format"}


@dataclass(frozen=True)
class FormatterConfig:
    """
    Settings for formatting query results.

    Attributes:
        row_id_field: Reserved row-identity field copied through verbatim
        timezone: IANA timezone name to render timezone-aware dates in
            (None renders them in their own offset)
        default_date_format: Pattern used for date columns with no or an
            unknown configured format
        log_level: Logging level name for the command-line tools
    """
    row_id_field: str = DEFAULT_ROW_ID_FIELD
    timezone: Optional[str] = None
    default_date_format: str = DateFormat.DATE.value
    log_level: str = "WARNING"

    @property
    def tzinfo(self) -> Optional[ZoneInfo]:
        """Resolve `timezone` to a tzinfo, or None if unset or unknown."""
        if not self.timezone:
            return None
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            log.warning("Unknown timezone %r, rendering dates without conversion", self.timezone)
            return None

    @property
    def date_format(self) -> DateFormat:
        return DateFormat.from_string(self.default_date_format)


def load_env(environ: Optional[Mapping[str, str]] = None) -> dict:
    """
    Load configuration values from DTABLE_* environment variables.

    Only names matching FormatterConfig fields (or ENV_ALIASES) are
    read; empty values are ignored.

    Args:
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Dict of field name -> value
    """
    if environ is None:
        environ = os.environ

    names = {f.name for f in fields(FormatterConfig)}
    config = {}
    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        field_name = key[len(ENV_PREFIX):].lower()
        field_name = ENV_ALIASES.get(field_name, field_name)
        if field_name in names and value.strip():
            config[field_name] = value.strip()
    return config


def load_config(
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None
) -> FormatterConfig:
    """
    Resolve a FormatterConfig.

    Precedence: overrides (non-None values) > environment > defaults.

    Args:
        overrides: Explicit values, e.g. from command-line flags
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Resolved FormatterConfig

    Raises:
        TypeError: If an override names an unknown field
    """
    config = FormatterConfig()
    env_values = load_env(environ)
    if env_values:
        config = replace(config, **env_values)

    if overrides:
        explicit = {k: v for k, v in overrides.items() if v is not None}
        if explicit:
            config = replace(config, **explicit)

    return config
