"""Low-level HTTP client for the Frontegg REST API.

Handles vendor authentication, bearer headers, error mapping and JSON decoding.
"""
from __future__ import annotations
import os
from typing import Any, Callable, Optional, Union

import requests

from .exceptions import ResponseDecodeError, StatusError, TransportError

API_BASE_URL = "https://api.frontegg.com"
REQUEST_TIMEOUT = 5

Timeout = Union[float, tuple, None]


class FronteggClient:
    """HTTP client for the Frontegg API.
    
    Every verb accepts a ``timeout`` that is handed to ``requests`` untouched;
    it is the only cancellation signal this client understands. Nothing is
    retried here.
    
    Usage:
        client = FronteggClient("https://api.frontegg.com")
        client.authenticate_vendor("client-id", "secret-key")
        permissions = client.get("/identity/resources/permissions/v1")
    """
    
    def __init__(self, base_url: Optional[str] = None, timeout: Timeout = REQUEST_TIMEOUT):
        """Initialize Frontegg client.
        
        Args:
            base_url: API base URL (defaults to FRONTEGG_API_URL env var)
            timeout: Default per-request timeout in seconds
        """
        self.base_url = (base_url or os.environ.get("FRONTEGG_API_URL", API_BASE_URL)).rstrip("/")
        self.timeout = timeout
        self._token: Optional[str] = None
    
    def authenticate_vendor(self, client_id: str, secret: str, *, timeout: Timeout = None) -> str:
        """Exchange vendor credentials for a bearer token.
        
        Args:
            client_id: Frontegg vendor client ID
            secret: Frontegg vendor secret key
            timeout: Request timeout override
            
        Returns:
            Access token
        """
        url = self._url("/auth/vendor")
        try:
            resp = requests.post(
                url,
                json={"clientId": client_id, "secret": secret},
                timeout=self._timeout(timeout),
            )
        except requests.RequestException as e:
            raise TransportError(str(e), url) from e
        self._handle_error(resp)
        body = self._decode(resp)
        token = body.get("token") if isinstance(body, dict) else None
        if not token:
            raise ResponseDecodeError("authentication response carries no token", url)
        self._token = token
        return token
    
    @property
    def authenticated(self) -> bool:
        return bool(self._token)
    
    def get(self, path: str, *, timeout: Timeout = None) -> Any:
        """List a collection and return the decoded body.
        
        Raises:
            TransportError: On network or decoding failure
            StatusError: On non-success status
        """
        resp = self._send(requests.get, path, timeout=timeout)
        return self._decode(resp)
    
    def post(self, path: str, json: Any = None, *, timeout: Timeout = None) -> Any:
        """Create records and return the decoded response body."""
        resp = self._send(requests.post, path, json=json, timeout=timeout)
        return self._decode(resp)
    
    def patch(self, path: str, json: Any = None, *, timeout: Timeout = None) -> None:
        """Partially update one record; the response body is ignored."""
        self._send(requests.patch, path, json=json, timeout=timeout)
    
    def delete(self, path: str, *, timeout: Timeout = None) -> None:
        """Delete one record; the response body is ignored."""
        self._send(requests.delete, path, timeout=timeout)
    
    def _send(self, method: Callable[..., requests.Response], path: str, *, timeout: Timeout = None,
              **kwargs) -> requests.Response:
        """Issue an authenticated request and map failures to typed errors."""
        url = self._url(path)
        if not self._token:
            raise StatusError(401, "Not authenticated - call authenticate_vendor first", url)
        headers = kwargs.pop("headers", {})
        headers["Authorization"] = f"Bearer {self._token}"
        
        try:
            resp = method(url, headers=headers, timeout=self._timeout(timeout), **kwargs)
        except requests.RequestException as e:
            raise TransportError(str(e), url) from e
        self._handle_error(resp)
        return resp
    
    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"
    
    def _timeout(self, timeout: Timeout) -> Timeout:
        return self.timeout if timeout is None else timeout
    
    def _decode(self, resp: requests.Response) -> Any:
        """Decode a JSON body; an empty body decodes to None."""
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise ResponseDecodeError(f"invalid JSON in response: {e}", resp.url) from e
    
    def _handle_error(self, resp: requests.Response) -> None:
        """Centralized error handling for HTTP responses.
        
        Raises:
            StatusError: If response status is outside 2xx
        """
        if 200 <= resp.status_code < 300:
            return
        raise StatusError(resp.status_code, _error_message(resp), resp.url)


def _error_message(resp: requests.Response) -> str:
    """Pull the remote error text out of a failed response."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text
    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, list) and errors:
            return ", ".join(str(e) for e in errors)
        if body.get("message"):
            return str(body["message"])
    return resp.text


def create_client_with_token(base_url: Optional[str], token: str, timeout: Timeout = REQUEST_TIMEOUT) -> FronteggClient:
    """Create a pre-authenticated FronteggClient from an already issued token.
    
    Args:
        base_url: API base URL
        token: Pre-obtained bearer token
        timeout: Default per-request timeout in seconds
        
    Returns:
        FronteggClient instance with token pre-set
    """
    client = FronteggClient(base_url, timeout=timeout)
    client._token = token
    return client
