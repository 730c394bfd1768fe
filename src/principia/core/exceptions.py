"""
Exception hierarchy for the Principia trading bot.

Hard failures only. Routine "no trade this cycle" outcomes (trade below the
minimum size, live execution unavailable, quote failures) are reported as
ExecutionResult values by the execution gate instead of being raised.
"""

from typing import Optional


class PrincipiaError(Exception):
    """Base exception for all bot errors."""
    def __init__(self, message: str, error_code: Optional[str] = None):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class ValidationError(PrincipiaError):
    """Malformed market observation passed to the signal engine."""
    pass


class NetworkError(PrincipiaError):
    """Price or quote fetch failed (connection, timeout, non-2xx status)."""
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message, error_code=str(status) if status is not None else None)
        self.status = status


class ParseError(PrincipiaError):
    """Provider response could not be decoded."""
    pass


class ConfigurationError(PrincipiaError):
    """Invalid configuration values."""
    pass


class UnknownTokenError(ConfigurationError):
    """Trading pair references a token with no configured mint."""
    pass
