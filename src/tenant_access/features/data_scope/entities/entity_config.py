"""Ownership fields per entity kind."""

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple, Union


class EntityKind(str, Enum):
    """Record kinds that can be scoped by ownership."""

    CUSTOMERS = "customers"
    ORDERS = "orders"
    TASKS = "tasks"
    INTERACTIONS = "interactions"
    SAVED_REPORTS = "saved_reports"
    PRODUCTS = "products"
    CATEGORIES = "categories"
    INVENTORY = "inventory"


ASSIGNED_TO_FIELD = "assignedTo"
CREATED_BY_FIELD = "createdBy"

_ASSIGNED_OR_CREATED: Tuple[str, ...] = (ASSIGNED_TO_FIELD, CREATED_BY_FIELD)

OWNER_FIELDS: Mapping[EntityKind, Tuple[str, ...]] = MappingProxyType({
    EntityKind.CUSTOMERS: _ASSIGNED_OR_CREATED,
    EntityKind.ORDERS: _ASSIGNED_OR_CREATED,
    EntityKind.TASKS: _ASSIGNED_OR_CREATED,
    EntityKind.INTERACTIONS: _ASSIGNED_OR_CREATED,
    EntityKind.SAVED_REPORTS: (CREATED_BY_FIELD,),
    # Catalog kinds carry no owner column: only view_all principals see rows
    EntityKind.PRODUCTS: (),
    EntityKind.CATEGORIES: (),
    EntityKind.INVENTORY: (),
})


def owner_fields_for(entity_kind: Union[EntityKind, str, None]) -> Optional[Tuple[str, ...]]:
    """Return the owner fields of an entity kind, or None if the kind is unknown."""
    if entity_kind is None:
        return None
    try:
        return OWNER_FIELDS[EntityKind(entity_kind)]
    except ValueError:
        return None
