"""Exceptions raised at the boundaries of the listening session."""


class AcquisitionError(Exception):
    """Capture resource (microphone / recognizer) could not be acquired."""


class PermissionDeniedError(AcquisitionError):
    """The user or the platform denied microphone access."""


class ConfigError(ValueError):
    """Configuration value is missing or out of range."""
