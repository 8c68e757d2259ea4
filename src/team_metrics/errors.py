from __future__ import annotations


class ConfigError(ValueError):
    """Bad or missing configuration: unknown provider, missing MODE, invalid URL."""


class Cancelled(RuntimeError):
    def __init__(self, message: str = "cancelled") -> None:
        super().__init__(message)
