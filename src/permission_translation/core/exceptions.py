"""permission-translation exception hierarchy."""

from __future__ import annotations


class PermissionTranslationError(Exception):
    """Base exception for all permission-translation errors."""


class ConfigError(PermissionTranslationError):
    """Raised when the configuration is invalid or cannot be read."""


class ConfigNotFoundError(ConfigError):
    """Raised when the configuration file does not exist."""


class UnknownCapabilityError(PermissionTranslationError, KeyError):
    """Raised when a capability name is not declared by the descriptor."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown capability {name!r}")

    def __str__(self) -> str:
        return str(self.args[0])
