"""Hierarchical permission resolution.

Matching rules, most specific to least specific:

- a global wildcard (``*``) or admin wildcard (``admin:*``) grants everything
- an exact match grants a well-formed permission, or the ``view_all`` flag
- ``module:action`` is granted by ``module:*``
- ``module:submodule:action`` is granted by ``module:*``, ``module:action``,
  ``module:submodule:*`` or the exact token

A submodule grant never widens to the whole module, and a module grant for a
different action never implies the submodule one. The resolver holds no
state and needs no synchronization.
"""

import logging
from typing import Dict, FrozenSet, Iterable, Optional, Set, Union

from ....config.constants import CAPABILITY_ACTIONS, PermissionTokens, TenantRole
from ....core.entities import Principal
from ....core.exceptions import MalformedPermission
from ..entities.permission import PermissionString
from ..entities.role_defaults import default_permissions_for

logger = logging.getLogger(__name__)

PermissionSet = Union[FrozenSet[str], Set[str]]

_UNRESTRICTED_TOKENS = frozenset({
    PermissionTokens.GLOBAL_WILDCARD,
    PermissionTokens.ADMIN_WILDCARD,
})

# Single-segment flags matched by exact token only
_FLAG_TOKENS = frozenset({PermissionTokens.VIEW_ALL})


class PermissionResolver:
    """Stateless permission matcher and effective-permission builder."""

    def has_permission(self, granted: Iterable[str], required: str) -> bool:
        """Check whether ``granted`` satisfies ``required``.

        A malformed requirement is a configuration error: it is logged and
        the check fails closed.
        """
        granted = _as_set(granted)

        if self.is_unrestricted(granted):
            return True

        if required in _FLAG_TOKENS:
            return required in granted

        try:
            permission = PermissionString.parse(required)
        except MalformedPermission as e:
            logger.error(f"Malformed permission requirement, denying: {e.message}")
            return False

        if required in granted:
            return True

        if permission.module_wildcard in granted:
            return True

        if not permission.is_submodule_scoped:
            return False

        return (
            permission.module_action in granted
            or permission.submodule_wildcard in granted
        )

    def has_any(self, granted: Iterable[str], required: Iterable[str]) -> bool:
        """OR semantics. An empty requirement set is never satisfied."""
        granted = _as_set(granted)
        return any(self.has_permission(granted, permission) for permission in required)

    def has_all(self, granted: Iterable[str], required: Iterable[str]) -> bool:
        """AND semantics. An empty requirement set is trivially satisfied."""
        granted = _as_set(granted)
        return all(self.has_permission(granted, permission) for permission in required)

    def missing(self, granted: Iterable[str], required: Iterable[str]) -> Set[str]:
        """Return the requirements ``granted`` does not satisfy."""
        granted = _as_set(granted)
        return {permission for permission in required if not self.has_permission(granted, permission)}

    def is_unrestricted(self, granted: Iterable[str]) -> bool:
        return not _UNRESTRICTED_TOKENS.isdisjoint(_as_set(granted))

    def can_view_all(self, granted: Iterable[str]) -> bool:
        """Whether ownership scoping is lifted for this permission set."""
        granted = _as_set(granted)
        # view_all is a single-segment flag, so it is only ever an exact match
        return (
            PermissionTokens.VIEW_ALL in granted
            or self.has_permission(granted, PermissionTokens.ANY_VIEW_ALL)
        )

    def can_only_view_own(self, granted: Iterable[str]) -> bool:
        return not self.can_view_all(granted)

    def module_capabilities(self, granted: Iterable[str], module: str) -> Dict[str, bool]:
        """Summarize which common actions are allowed on a module."""
        granted = _as_set(granted)
        return {
            action: self.has_permission(granted, f"{module}:{action}")
            for action in CAPABILITY_ACTIONS
        }

    def submodule_capabilities(self, granted: Iterable[str], module: str, submodule: str) -> Dict[str, bool]:
        """Summarize which common actions are allowed on a submodule."""
        granted = _as_set(granted)
        return {
            action: self.has_permission(granted, f"{module}:{submodule}:{action}")
            for action in CAPABILITY_ACTIONS
        }

    def role_defaults(self, role: Optional[Union[TenantRole, str]]) -> FrozenSet[str]:
        return default_permissions_for(role)

    def effective_permissions(self, principal: Principal) -> FrozenSet[str]:
        """Role defaults unioned with the principal's explicit overrides."""
        role = TenantRole.ADMIN if principal.is_super_admin else principal.tenant_role
        return self.role_defaults(role) | principal.permission_overrides


def _as_set(granted: Iterable[str]) -> PermissionSet:
    if isinstance(granted, (set, frozenset)):
        return granted
    return frozenset(granted or ())


default_resolver = PermissionResolver()

has_permission = default_resolver.has_permission
has_any = default_resolver.has_any
has_all = default_resolver.has_all
can_view_all = default_resolver.can_view_all
effective_permissions = default_resolver.effective_permissions
