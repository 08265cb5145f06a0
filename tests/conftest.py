"""Pytest shared fixtures."""
import json
import pathlib
import sys
from typing import Any, Optional
from unittest.mock import MagicMock

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests

from permsync.core.frontegg import FronteggClient, ResourceData, PERMISSION_SCHEMA


def _make_response(status_code: int = 200, payload: Any = None, *, text: Optional[str] = None,
                  url: str = "https://api.frontegg.test/") -> requests.Response:
    """Build a real requests.Response without touching the network."""
    resp = requests.Response()
    resp.status_code = status_code
    resp.url = url
    if text is not None:
        resp._content = text.encode("utf-8")
    elif payload is not None:
        resp._content = json.dumps(payload).encode("utf-8")
    else:
        resp._content = b""
    return resp


@pytest.fixture
def make_response():
    """Factory for offline requests.Response objects."""
    return _make_response


@pytest.fixture(autouse=True)
def _block_network(monkeypatch):
    """Fail loudly if a unit test reaches for the real network."""
    def _refuse(*args, **kwargs):
        raise AssertionError(f"unexpected network call: {args[:2]}")
    
    monkeypatch.setattr("requests.sessions.Session.request", _refuse)


@pytest.fixture
def remote_record():
    return {
        "id": "p-1",
        "categoryId": "cat-1",
        "name": "Read Users",
        "key": "read:users",
        "description": "desc",
        "createdAt": "2024-01-01T00:00:00Z",
    }


@pytest.fixture
def declared():
    """Declared state of a permission that has not been created yet."""
    return ResourceData(PERMISSION_SCHEMA, {
        "name": "Read Users",
        "key": "read:users",
        "category_id": "cat-1",
        "description": "desc",
    })


@pytest.fixture
def mock_client():
    """Remote client double with the FronteggClient surface."""
    client = MagicMock(spec=FronteggClient)
    client.post.return_value = []
    client.get.return_value = []
    client.patch.return_value = None
    client.delete.return_value = None
    return client
