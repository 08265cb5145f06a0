"""Frontegg-specific exceptions for error handling."""
from __future__ import annotations
from typing import Any


class FronteggError(Exception):
    """Base exception for all Frontegg operations."""
    pass


class FronteggAPIError(FronteggError):
    """Failure reported by the Frontegg API client."""
    pass


class TransportError(FronteggAPIError):
    """Network, connection or timeout failure talking to the API.
    
    Attributes:
        message: Description of the underlying failure
        endpoint: URL that was being called
    """
    
    def __init__(self, message: str, endpoint: str):
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"{endpoint}: {message}")


class ResponseDecodeError(TransportError):
    """Response body could not be decoded as JSON."""
    pass


class StatusError(FronteggAPIError):
    """Non-success HTTP status from the Frontegg API.
    
    Attributes:
        status_code: HTTP status code
        message: Error message from response
        endpoint: API endpoint that failed
    """
    
    def __init__(self, status_code: int, message: str, endpoint: str):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"[{status_code}] {endpoint}: {message}")


class UnexpectedResultCountError(FronteggError):
    """Create returned a collection that does not hold exactly one record."""
    
    def __init__(self, count: int):
        self.count = count
        super().__init__(
            f"server returned unexpected number of results when creating permission: {count}"
        )


class StateWriteError(FronteggError):
    """Declared-state store rejected an attribute assignment."""
    
    def __init__(self, key: str, value: Any, reason: str):
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"cannot set '{key}' to {value!r}: {reason}")
