"""Permission string value object.

A permission is a colon-delimited token with two or three segments:
``module:action`` or ``module:submodule:action``. Any segment may be the
wildcard ``*``.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from ....config.constants import PermissionTokens
from ....core.exceptions import MalformedPermission


@dataclass(frozen=True)
class PermissionString:
    """Immutable, parsed permission token."""

    module: str
    action: str
    submodule: Optional[str] = None

    @classmethod
    def parse(cls, value: str) -> "PermissionString":
        """Parse ``module:action`` or ``module:submodule:action``.

        Raises:
            MalformedPermission: if the token does not have 2 or 3 non-empty segments
        """
        if not isinstance(value, str):
            raise MalformedPermission(repr(value))

        parts = value.split(PermissionTokens.SEPARATOR)
        if len(parts) not in (2, 3) or not all(parts):
            raise MalformedPermission(value)

        if len(parts) == 2:
            module, action = parts
            return cls(module=module, action=action)

        module, submodule, action = parts
        return cls(module=module, action=action, submodule=submodule)

    @property
    def segments(self) -> Tuple[str, ...]:
        if self.submodule is None:
            return (self.module, self.action)
        return (self.module, self.submodule, self.action)

    @property
    def is_submodule_scoped(self) -> bool:
        return self.submodule is not None

    @property
    def module_wildcard(self) -> str:
        """``module:*`` grants every action on the module."""
        return f"{self.module}:{PermissionTokens.WILDCARD_SEGMENT}"

    @property
    def module_action(self) -> str:
        """``module:action``, the module-level form of this permission."""
        return f"{self.module}:{self.action}"

    @property
    def submodule_wildcard(self) -> Optional[str]:
        """``module:submodule:*`` for 3-segment permissions."""
        if self.submodule is None:
            return None
        return f"{self.module}:{self.submodule}:{PermissionTokens.WILDCARD_SEGMENT}"

    def __str__(self) -> str:
        return PermissionTokens.SEPARATOR.join(self.segments)
