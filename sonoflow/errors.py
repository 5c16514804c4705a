"""Error taxonomy shared by the streaming engine and the enhancement boundary."""

from typing import Any, Optional


class SonoFlowError(Exception):
    """Base class for all SonoFlow errors."""

    @property
    def message(self) -> str:
        return str(self)


class ConfigurationError(SonoFlowError):
    """Recognition backend (or other provider) credentials/configuration are missing."""


class UpstreamError(SonoFlowError):
    """An external provider failed after a connection was established."""

    def __init__(self, message: str, status: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.status = status
        self.details = details


class ValidationError(SonoFlowError):
    """Required caller input is missing or malformed."""
