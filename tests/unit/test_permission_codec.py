"""Unit tests for the permission codec."""
import pytest

from permsync.core.frontegg.exceptions import StateWriteError
from permsync.core.frontegg.permissions import (
    Permission,
    apply_to_state,
    from_wire,
    permission_from_state,
    to_wire,
)
from permsync.core.frontegg.state import PERMISSION_SCHEMA, ResourceData


def test_to_wire_never_sends_server_owned_fields():
    wire = to_wire(Permission(
        id="p-1", category_id="cat-1", name="Read Users",
        key="read:users", description="desc", created_at="2024-01-01T00:00:00Z",
    ))
    assert wire == {
        "categoryId": "cat-1",
        "name": "Read Users",
        "key": "read:users",
        "description": "desc",
    }


def test_to_wire_omits_empty_fields():
    assert to_wire(Permission(name="Only name")) == {"name": "Only name"}


def test_from_wire_maps_camel_case(remote_record):
    perm = from_wire(remote_record)
    assert perm == Permission(
        id="p-1", category_id="cat-1", name="Read Users",
        key="read:users", description="desc", created_at="2024-01-01T00:00:00Z",
    )


def test_from_wire_null_and_missing_become_empty():
    perm = from_wire({"id": "p-1", "description": None})
    assert perm.description == ""
    assert perm.created_at == ""


def test_state_round_trip_keeps_identity_and_timestamp(declared):
    declared.set_id("p-1")
    declared.set("created_at", "2024-01-01T00:00:00Z")
    
    wire = to_wire(permission_from_state(declared))
    echoed = from_wire(dict(wire, id=declared.id, createdAt=declared.get("created_at")))
    apply_to_state(declared, echoed)
    
    assert declared.id == "p-1"
    assert declared.get("name") == "Read Users"
    assert declared.get("key") == "read:users"
    assert declared.get("category_id") == "cat-1"
    assert declared.get("description") == "desc"
    assert declared.get("created_at") == "2024-01-01T00:00:00Z"


def test_permission_from_state_ignores_identity(declared):
    declared.set_id("p-1")
    perm = permission_from_state(declared)
    assert perm.id == ""
    assert perm.created_at == ""


def test_apply_to_state_surfaces_first_error_after_all_writes():
    data = ResourceData(PERMISSION_SCHEMA)
    bad = Permission(
        id="p-1", category_id="cat-1", name=123, key="read:users",
        description=["not", "a", "string"], created_at="2024-01-01T00:00:00Z",
    )
    with pytest.raises(StateWriteError) as exc:
        apply_to_state(data, bad)
    
    assert exc.value.key == "name"
    # later assignments were still attempted
    assert data.id == "p-1"
    assert data.get("key") == "read:users"
    assert data.get("created_at") == "2024-01-01T00:00:00Z"


def test_apply_to_state_logs_bad_identity(caplog):
    data = ResourceData(PERMISSION_SCHEMA)
    bad = Permission(id=17, name="Read Users")
    
    with caplog.at_level("DEBUG", logger="permsync.core.frontegg.permissions"):
        with pytest.raises(StateWriteError) as exc:
            apply_to_state(data, bad)
    
    assert exc.value.key == "id"
    assert "cannot set 'id'" in caplog.text
    assert data.get("name") == "Read Users"
