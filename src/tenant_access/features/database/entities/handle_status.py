"""Cached per-tenant handle status."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ....config.constants import HandleState


@dataclass
class HandleStatus:
    """Last known state of one tenant's handle.

    Reported from the router's cache; reading it never touches the database.
    """

    tenant_id: str
    state: HandleState = HandleState.UNRESOLVED
    connected_at: Optional[datetime] = None
    last_checked_at: Optional[datetime] = None
    last_error: Optional[str] = None
    connection_count: int = 0

    @property
    def is_connected(self) -> bool:
        return self.state == HandleState.READY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tenant_id": self.tenant_id,
            "state": self.state.value,
            "is_connected": self.is_connected,
            "connected_at": self.connected_at.isoformat() if self.connected_at else None,
            "last_checked_at": self.last_checked_at.isoformat() if self.last_checked_at else None,
            "last_error": self.last_error,
            "connection_count": self.connection_count,
        }
