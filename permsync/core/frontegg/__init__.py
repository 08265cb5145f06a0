"""Frontegg API client and permission reconciliation.

Architecture:
- client.py: HTTP client with vendor authentication and error mapping
- state.py: Schema-checked declared-state store
- permissions.py: Permission codec and lifecycle service
- exceptions.py: Typed exceptions for error handling

Usage:
    from permsync.core.frontegg import (
        FronteggClient, PermissionService, ResourceData, PERMISSION_SCHEMA,
    )
    
    client = FronteggClient()
    client.authenticate_vendor("client-id", "secret-key")
    
    data = ResourceData(PERMISSION_SCHEMA, {
        "name": "Read Users", "key": "read:users",
        "category_id": "cat-1", "description": "Read access to users",
    })
    PermissionService(client).create(data)
"""
from .client import (
    FronteggClient,
    create_client_with_token,
    API_BASE_URL,
    REQUEST_TIMEOUT,
)
from .exceptions import (
    FronteggError,
    FronteggAPIError,
    TransportError,
    ResponseDecodeError,
    StatusError,
    UnexpectedResultCountError,
    StateWriteError,
)
from .state import (
    Attribute,
    ResourceData,
    PERMISSION_SCHEMA,
)
from .permissions import (
    Permission,
    PermissionService,
    PERMISSIONS_PATH,
    to_wire,
    from_wire,
    permission_from_state,
    apply_to_state,
)

__all__ = [
    # Client
    "FronteggClient",
    "create_client_with_token",
    "API_BASE_URL",
    "REQUEST_TIMEOUT",
    
    # Exceptions
    "FronteggError",
    "FronteggAPIError",
    "TransportError",
    "ResponseDecodeError",
    "StatusError",
    "UnexpectedResultCountError",
    "StateWriteError",
    
    # State
    "Attribute",
    "ResourceData",
    "PERMISSION_SCHEMA",
    
    # Permissions
    "Permission",
    "PermissionService",
    "PERMISSIONS_PATH",
    "to_wire",
    "from_wire",
    "permission_from_state",
    "apply_to_state",
]
