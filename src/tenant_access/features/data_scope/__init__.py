"""Data scope feature.

Turns a principal's permissions into ownership filters so that roles
without ``view_all`` only ever see their own records.
"""

from .entities import (
    Predicate,
    MatchAll,
    MatchNone,
    FieldEquals,
    AllOf,
    AnyOf,
    MATCH_ALL,
    MATCH_NONE,
    EntityKind,
    OWNER_FIELDS,
    owner_fields_for,
)
from .services import DataScopeTranslator, default_translator, scope_for

__all__ = [
    "Predicate",
    "MatchAll",
    "MatchNone",
    "FieldEquals",
    "AllOf",
    "AnyOf",
    "MATCH_ALL",
    "MATCH_NONE",
    "EntityKind",
    "OWNER_FIELDS",
    "owner_fields_for",
    "DataScopeTranslator",
    "default_translator",
    "scope_for",
]
