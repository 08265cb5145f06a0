"""Frontegg permission reconciliation.

Two halves:
- a codec between the declared state (ResourceData) and the wire record
- PermissionService, which drives create/read/update/delete against the API

The permissions endpoint has no fetch-by-id, so ``read`` lists the whole
collection and scans it for the identity. That costs O(number of remote
permissions) per read and is never cached.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .client import FronteggClient, Timeout
from .exceptions import ResponseDecodeError, StateWriteError, UnexpectedResultCountError
from .state import ResourceData

logger = logging.getLogger(__name__)

PERMISSIONS_PATH = "/identity/resources/permissions/v1"

# declared-state attribute -> wire field, for the writable fields
_WRITABLE_FIELDS = {
    "category_id": "categoryId",
    "name": "name",
    "key": "key",
    "description": "description",
}


@dataclass
class Permission:
    """Typed permission record as exchanged with the API."""
    id: str = ""
    category_id: str = ""
    name: str = ""
    key: str = ""
    description: str = ""
    created_at: str = ""


def to_wire(permission: Permission) -> Dict[str, Any]:
    """Serialize the writable fields; empty values and server-owned fields are omitted."""
    wire = {}
    for attr, field_name in _WRITABLE_FIELDS.items():
        value = getattr(permission, attr)
        if value:
            wire[field_name] = value
    return wire


def from_wire(record: Mapping[str, Any]) -> Permission:
    """Decode a wire record; JSON null decodes as an empty string."""
    def _field(name: str) -> Any:
        value = record.get(name)
        return "" if value is None else value
    
    return Permission(
        id=_field("id"),
        category_id=_field("categoryId"),
        name=_field("name"),
        key=_field("key"),
        description=_field("description"),
        created_at=_field("createdAt"),
    )


def permission_from_state(data: ResourceData) -> Permission:
    """Read the declared writable fields out of the state store."""
    return Permission(
        name=data.get("name"),
        key=data.get("key"),
        category_id=data.get("category_id"),
        description=data.get("description"),
    )


def apply_to_state(data: ResourceData, permission: Permission) -> None:
    """Write a decoded permission into the state store in place.
    
    Every assignment is attempted so that all problems get logged; the first
    StateWriteError is the one raised.
    """
    first_error: Optional[StateWriteError] = None
    assignments = [
        ("name", permission.name),
        ("key", permission.key),
        ("category_id", permission.category_id),
        ("description", permission.description),
        ("created_at", permission.created_at),
    ]
    try:
        data.set_id(permission.id)
    except StateWriteError as e:
        logger.debug("[permission] %s", e)
        first_error = e
    for key, value in assignments:
        try:
            data.set(key, value)
        except StateWriteError as e:
            logger.debug("[permission] %s", e)
            if first_error is None:
                first_error = e
    if first_error is not None:
        raise first_error


class PermissionService:
    """Reconcile declared permission state against the Frontegg API.
    
    Client errors (TransportError, StatusError) propagate unchanged; nothing
    is retried at this layer.
    """
    
    def __init__(self, client: FronteggClient, path: str = PERMISSIONS_PATH):
        """Initialize permission service.
        
        Args:
            client: Authenticated Frontegg client
            path: Permissions collection endpoint
        """
        self.client = client
        self.path = path.rstrip("/")
    
    def create(self, data: ResourceData, *, timeout: Timeout = None) -> None:
        """Create the permission and store the server-assigned id and createdAt.
        
        Raises:
            UnexpectedResultCountError: If the API does not return exactly one record
        """
        payload = [to_wire(permission_from_state(data))]
        out = self.client.post(self.path, json=payload, timeout=timeout)
        results = out if isinstance(out, list) else []
        if len(results) != 1:
            raise UnexpectedResultCountError(len(results))
        apply_to_state(data, from_wire(results[0]))
        logger.info("[permission] Created '%s' (id=%s)", data.get("key"), data.id)
    
    def read(self, data: ResourceData, *, timeout: Timeout = None) -> bool:
        """Refresh state from the API.
        
        Returns:
            True if the permission exists upstream, False if it has disappeared
            (the identity is cleared and the resource is treated as absent)
            
        Raises:
            ResponseDecodeError: If the list body is not a JSON array
        """
        out = self.client.get(self.path, timeout=timeout)
        if out is None:
            out = []
        if not isinstance(out, list):
            raise ResponseDecodeError(
                f"expected a list of permissions, got {type(out).__name__}", self.path
            )
        for record in out:
            if not isinstance(record, Mapping):
                logger.debug("[permission] Skipping malformed list entry %r", record)
                continue
            if record.get("id") == data.id:
                apply_to_state(data, from_wire(record))
                return True
        
        logger.warning("[permission] id=%s no longer exists upstream; marking absent", data.id)
        data.set_id("")
        return False
    
    def update(self, data: ResourceData, *, timeout: Timeout = None) -> bool:
        """Patch the writable fields, then re-read to pick up the stored result.
        
        Returns:
            Result of the follow-up read
        """
        payload = to_wire(permission_from_state(data))
        self.client.patch(self._entity_path(data.id), json=payload, timeout=timeout)
        logger.info("[permission] Updated id=%s", data.id)
        return self.read(data, timeout=timeout)
    
    def delete(self, data: ResourceData, *, timeout: Timeout = None) -> None:
        """Delete the permission upstream.
        
        The caller clears the local identity once this returns; no
        verification read is made.
        """
        self.client.delete(self._entity_path(data.id), timeout=timeout)
        logger.info("[permission] Deleted id=%s", data.id)
    
    def _entity_path(self, permission_id: str) -> str:
        return f"{self.path}/{permission_id}"
