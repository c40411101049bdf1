"""Transport-agnostic view of an inbound request."""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from ....core.entities import Principal


@dataclass(frozen=True)
class AccessRequest:
    """Everything the access pipeline reads from a request.

    Header names are matched case-insensitively.
    """

    principal: Optional[Principal] = None
    path_params: Mapping[str, Any] = field(default_factory=dict)
    query_params: Mapping[str, Any] = field(default_factory=dict)
    body: Optional[Mapping[str, Any]] = None
    headers: Mapping[str, str] = field(default_factory=dict)
    host: Optional[str] = None
    client_address: Optional[str] = None

    def header(self, name: str) -> Optional[str]:
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    @property
    def effective_host(self) -> Optional[str]:
        return self.host or self.header("host")

    @property
    def upload_size(self) -> int:
        """Declared size in bytes of an incoming upload, 0 if none."""
        if not isinstance(self.body, Mapping):
            return 0
        for key in ("fileSize", "size"):
            value = self.body.get(key)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return int(value)
        return 0
