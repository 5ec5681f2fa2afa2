"""Configuration loading for the listening session.

The JSON file keeps the same shape as the rest of the app configuration:
a "session" section read into SessionConfig, plus "audio" and "model"
sections consumed as plain dicts by the capture modules.
"""
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Tuple

from numberexplorer.ChineseNumerals import MAX_LABEL_VALUE
from numberexplorer.errors import ConfigError
from numberexplorer.NumeralInterpreter import SUPPORTED_LANGUAGES, language_of
from numberexplorer.RecoveryPolicy import (
    DEFAULT_MAX_ERRORS,
    DEFAULT_RESTART_DELAY,
    NO_SPEECH_CODE,
    RECOGNIZER_DOMAIN,
    RecoveryPolicy,
)
from numberexplorer.types import LearningMode


def load_config(config_path: str) -> Dict:
    """Load configuration from JSON file.

    Args:
        config_path: Path to number_explorer_config.json

    Returns:
        Configuration dictionary
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def _as_int(value: Any, name: str) -> int:
    """Convert value to int, rejecting booleans and fractional numbers."""
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    return int(value)


@dataclass(frozen=True)
class SessionConfig:
    """Validated session options.

    Attributes:
        max_errors: Retry budget before the session fails
        restart_delay: Backoff in seconds before re-acquiring capture
        target_start: First target value (inclusive)
        target_stop: Last target value (inclusive)
        locale: Spelled-number grammar for ENGLISH mode
        mode: Initial learning mode
        ignorable_errors: (domain, code) pairs that never count as failures
    """
    max_errors: int = DEFAULT_MAX_ERRORS
    restart_delay: float = DEFAULT_RESTART_DELAY
    target_start: int = 0
    target_stop: int = MAX_LABEL_VALUE
    locale: str = 'en-US'
    mode: LearningMode = LearningMode.ENGLISH
    ignorable_errors: Tuple[Tuple[str, int], ...] = field(
        default=((RECOGNIZER_DOMAIN, NO_SPEECH_CODE),)
    )

    def __post_init__(self):
        if self.max_errors < 1:
            raise ConfigError(f"max_errors must be >= 1, got {self.max_errors}")
        if self.restart_delay < 0:
            raise ConfigError(f"restart_delay must be >= 0, got {self.restart_delay}")
        if not 0 <= self.target_start <= self.target_stop <= MAX_LABEL_VALUE:
            raise ConfigError(
                f"target range must satisfy 0 <= start <= stop <= {MAX_LABEL_VALUE}, "
                f"got {self.target_start}..{self.target_stop}"
            )
        if language_of(self.locale) not in SUPPORTED_LANGUAGES:
            raise ConfigError(f"Unsupported locale: {self.locale}")

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "SessionConfig":
        """Build SessionConfig from the "session" section of a config dict.

        Missing keys fall back to defaults.

        Raises:
            ConfigError: value has the wrong type or is out of range
        """
        section = config.get('session', {})
        if not isinstance(section, dict):
            raise ConfigError(f"'session' must be an object, got {type(section).__name__}")
        defaults = cls()

        try:
            target_range = section.get('target_range', [defaults.target_start, defaults.target_stop])
            target_start, target_stop = (_as_int(v, 'target_range') for v in target_range)

            ignorable = section.get('ignorable_errors')
            if ignorable is None:
                ignorable_errors = defaults.ignorable_errors
            else:
                ignorable_errors = tuple((str(e['domain']), _as_int(e['code'], 'ignorable_errors')) for e in ignorable)

            mode = LearningMode(section.get('mode', defaults.mode.value))

            return cls(
                max_errors=_as_int(section.get('max_errors', defaults.max_errors), 'max_errors'),
                restart_delay=float(section.get('restart_delay', defaults.restart_delay)),
                target_start=target_start,
                target_stop=target_stop,
                locale=str(section.get('locale', defaults.locale)),
                mode=mode,
                ignorable_errors=ignorable_errors,
            )
        except (TypeError, ValueError, KeyError) as e:
            if isinstance(e, ConfigError):
                raise
            raise ConfigError(f"Invalid session configuration: {e}") from e

    def build_policy(self) -> RecoveryPolicy:
        return RecoveryPolicy(
            max_errors=self.max_errors,
            restart_delay=self.restart_delay,
            ignorable_errors=self.ignorable_errors,
        )
