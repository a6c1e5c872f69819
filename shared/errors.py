from __future__ import annotations
from typing import Optional


class DreamscapeError(Exception):
    """Base class for every error the proxies and the weaver report to a user."""


class ConfigurationError(DreamscapeError):
    """A server-held credential or backend setting is missing or unusable."""


class UpstreamError(DreamscapeError):
    """A provider answered with a non-success status or an unusable payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ProxyError(DreamscapeError):
    """The proxy layer failed, timed out or returned an undecodable body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AnalysisParseError(DreamscapeError):
    """The analysis text is not JSON or does not match the expected schema."""


class SynthesisError(DreamscapeError):
    """The synthesis response carried no decodable image artifact."""
