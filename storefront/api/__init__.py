"""
Module 'api': client authentifié vers le backend REST et appels typés.
"""

from .client import ApiClient, ApiResponse
from .errors import (
    ApiError,
    NetworkError,
    ProtocolError,
    RateLimited,
    RequestFailed,
    RequestTimeout,
    Unauthorized,
    ValidationFailed,
)
from .tokens import TokenProvider, NoTokenProvider, StaticTokenProvider, CallableTokenProvider

__all__ = [
    # client
    "ApiClient",
    "ApiResponse",
    # errors
    "ApiError",
    "Unauthorized",
    "RateLimited",
    "RequestFailed",
    "ValidationFailed",
    "NetworkError",
    "RequestTimeout",
    "ProtocolError",
    # tokens
    "TokenProvider",
    "NoTokenProvider",
    "StaticTokenProvider",
    "CallableTokenProvider",
]
