"""
Core building blocks shared by every component.
"""

from principia.core.exceptions import (
    PrincipiaError,
    ValidationError,
    NetworkError,
    ParseError,
    ConfigurationError,
    UnknownTokenError,
)

__all__ = [
    'PrincipiaError',
    'ValidationError',
    'NetworkError',
    'ParseError',
    'ConfigurationError',
    'UnknownTokenError',
]
