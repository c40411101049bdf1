"""Data scope entities."""

from .predicate import (
    Predicate,
    MatchAll,
    MatchNone,
    FieldEquals,
    AllOf,
    AnyOf,
    MATCH_ALL,
    MATCH_NONE,
    quote_identifier,
)
from .entity_config import (
    EntityKind,
    OWNER_FIELDS,
    ASSIGNED_TO_FIELD,
    CREATED_BY_FIELD,
    owner_fields_for,
)

__all__ = [
    "Predicate",
    "MatchAll",
    "MatchNone",
    "FieldEquals",
    "AllOf",
    "AnyOf",
    "MATCH_ALL",
    "MATCH_NONE",
    "quote_identifier",
    "EntityKind",
    "OWNER_FIELDS",
    "ASSIGNED_TO_FIELD",
    "CREATED_BY_FIELD",
    "owner_fields_for",
]
