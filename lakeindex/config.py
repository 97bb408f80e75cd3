"""
Runtime configuration.

Values come from keyword arguments or from ``LAKEINDEX_*`` environment
variables (``LAKEINDEX_SYSTEM_PATH``, ``LAKEINDEX_ENABLED``, ...).
"""
from enum import Enum
from typing import Mapping, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.exceptions import ConfigError


ENV_PREFIX = "LAKEINDEX_"


class DisplayMode(Enum):
    """How explain output is rendered."""
    PLAIN_TEXT = "plain"
    CONSOLE = "console"
    HTML = "html"


class LakeIndexConfig(BaseSettings):
    """⚙️ Settings shared by every component of a workspace."""

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, frozen=True, extra="ignore")

    """💾 Root directory for built index data"""
    system_path: str = "indexes"

    """📖 Directory for catalog metadata"""
    catalog_dir: str = "catalog"

    """🚦 Whether index rewriting starts enabled"""
    enabled: bool = False

    """🖥️ Default rendering for explain output"""
    display_mode: DisplayMode = DisplayMode.PLAIN_TEXT

    """📦 Number of datasets kept in the read cache"""
    cache_size: int = Field(default=64, gt=0)

    def __init__(self, **values):
        """
        Raises:
            ConfigError: If a value has the wrong shape
        """
        try:
            super().__init__(**values)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    @field_validator("display_mode", mode="before")
    @classmethod
    def _coerce_display_mode(cls, value):
        if isinstance(value, DisplayMode):
            return value
        return parse_display_mode(value)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'LakeIndexConfig':
        """
        Build a config from ``LAKEINDEX_<FIELD>`` variables.

        Args:
            environ: Variables to read instead of the process environment.
                When given, the process environment is not consulted at all.

        Raises:
            ConfigError: If a variable holds a value of the wrong shape
        """
        if environ is None:
            return cls()

        values = {}
        for key, raw in environ.items():
            if not key.startswith(ENV_PREFIX):
                continue
            name = key[len(ENV_PREFIX):].lower()
            if name in cls.model_fields:
                values[name] = raw

        # model_validate skips the environment sources that __init__ merges in
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e


def parse_display_mode(raw) -> DisplayMode:
    try:
        return DisplayMode(str(raw).strip().lower())
    except ValueError:
        choices = ", ".join(mode.value for mode in DisplayMode)
        raise ConfigError(f"Unknown display mode {raw!r} (expected one of: {choices})")
