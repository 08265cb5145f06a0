"""Declared-state store for managed resources.

The orchestrating caller hands resources around as a loosely typed map of
named attributes plus an opaque identity. This module gives that map a
schema so bad assignments fail loudly with StateWriteError instead of being
stored.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from .exceptions import StateWriteError


@dataclass(frozen=True)
class Attribute:
    """Schema entry for one declared-state attribute."""
    type: type
    description: str
    required: bool = False
    computed: bool = False


PERMISSION_SCHEMA: Dict[str, Attribute] = {
    "name": Attribute(str, "A human-readable name for the permission.", required=True),
    "key": Attribute(str, "A human-readable identifier for the permission.", required=True),
    "category_id": Attribute(
        str, "The identifier of the category to which this permission belongs.", required=True
    ),
    "description": Attribute(str, "A human-readable description of the permission.", required=True),
    "created_at": Attribute(str, "The timestamp at which the permission was created.", computed=True),
}


class ResourceData:
    """Caller-owned state of one resource instance.
    
    An empty ``id`` means the resource has not been created (or was found
    missing upstream).
    """
    
    def __init__(self, schema: Mapping[str, Attribute], values: Optional[Mapping[str, Any]] = None, id: str = ""):
        self.schema = dict(schema)
        self._values: Dict[str, Any] = {}
        self._id = ""
        self.set_id(id)
        for key, value in (values or {}).items():
            self.set(key, value)
    
    @classmethod
    def import_state(cls, schema: Mapping[str, Attribute], id: str) -> "ResourceData":
        """Build state from an identity alone; a read fills in the rest."""
        return cls(schema, id=id)
    
    @property
    def id(self) -> str:
        return self._id
    
    def set_id(self, value: str) -> None:
        if not isinstance(value, str):
            raise StateWriteError("id", value, "identity must be a string")
        self._id = value
    
    def get(self, key: str) -> Any:
        """Return the stored value, or the attribute type's zero value."""
        attribute = self.schema[key]
        if key in self._values:
            return self._values[key]
        return attribute.type()
    
    def set(self, key: str, value: Any) -> None:
        attribute = self.schema.get(key)
        if attribute is None:
            raise StateWriteError(key, value, "attribute not declared in schema")
        if not isinstance(value, attribute.type):
            raise StateWriteError(
                key, value, f"expected {attribute.type.__name__}, got {type(value).__name__}"
            )
        self._values[key] = value
    
    def missing_required(self) -> List[str]:
        return [key for key, attr in self.schema.items() if attr.required and not self.get(key)]
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self._id,
            "attributes": {key: self.get(key) for key in self.schema},
        }
    
    @classmethod
    def from_dict(cls, schema: Mapping[str, Attribute], payload: Mapping[str, Any]) -> "ResourceData":
        attributes = {
            key: value
            for key, value in (payload.get("attributes") or {}).items()
            if key in schema
        }
        return cls(schema, attributes, id=payload.get("id") or "")
    
    def __repr__(self) -> str:
        return f"ResourceData(id={self._id!r}, values={self._values!r})"
