"""Translate a permission set into a row-level record filter."""

import logging
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from ...permissions.services.permission_resolver import PermissionResolver, default_resolver
from ..entities.entity_config import EntityKind, owner_fields_for
from ..entities.predicate import MATCH_NONE, AllOf, AnyOf, FieldEquals, Predicate

logger = logging.getLogger(__name__)

Filters = Optional[Union[Predicate, Mapping[str, Any]]]


class DataScopeTranslator:
    """Builds ownership filters for principals without ``view_all``.

    Stateless; one instance may be shared by every request.
    """

    def __init__(self, resolver: Optional[PermissionResolver] = None):
        self.resolver = resolver or default_resolver

    def scope_for(
        self,
        entity_kind: Union[EntityKind, str],
        granted: Iterable[str],
        principal_id: str,
        extra_filters: Filters = None,
    ) -> Predicate:
        """Return the filter a query for ``entity_kind`` must apply.

        With ``view_all`` the caller's filters come back untouched. Otherwise
        the result only matches records the principal owns or created.
        """
        granted = frozenset(granted or ())
        if self.resolver.can_view_all(granted):
            return Predicate.from_filters(extra_filters)

        owner_fields = owner_fields_for(entity_kind)
        if owner_fields is None:
            logger.warning(f"No ownership mapping for entity kind {entity_kind!r}, scoping to nothing")
            return MATCH_NONE

        return self._restrict(owner_fields, principal_id, extra_filters)

    def scope_for_fields(
        self,
        owner_fields: Sequence[str],
        granted: Iterable[str],
        principal_id: str,
        extra_filters: Filters = None,
    ) -> Predicate:
        """Same as scope_for, with an explicit list of owner fields."""
        granted = frozenset(granted or ())
        if self.resolver.can_view_all(granted):
            return Predicate.from_filters(extra_filters)
        return self._restrict(tuple(owner_fields), principal_id, extra_filters)

    def _restrict(self, owner_fields, principal_id: str, extra_filters: Filters) -> Predicate:
        # Nothing to match ownership against: fail closed
        if not owner_fields or not principal_id:
            return MATCH_NONE

        ownership = AnyOf.of(*(FieldEquals(field, principal_id) for field in owner_fields))
        return AllOf.of(Predicate.from_filters(extra_filters), ownership)


default_translator = DataScopeTranslator()
scope_for = default_translator.scope_for
