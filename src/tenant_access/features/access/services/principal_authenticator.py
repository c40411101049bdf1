"""Bearer token authentication."""

import logging
from typing import Any, Dict, Optional, Sequence

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError

from ....core.entities import Principal
from ....core.exceptions import AuthenticationFailed, AuthenticationRequired

logger = logging.getLogger(__name__)


class JwtPrincipalAuthenticator:
    """Builds a Principal from a signed JWT.

    Claims read: ``sub`` (or ``userId``), ``systemRole``, ``tenantId``,
    ``role`` and ``permissions``.
    """

    def __init__(self, secret: str, algorithms: Sequence[str] = ("HS256",), audience: Optional[str] = None):
        self._secret = secret
        self._algorithms = list(algorithms)
        self._audience = audience

    def decode(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=self._algorithms,
                audience=self._audience,
                options={"verify_exp": True, "verify_aud": self._audience is not None},
            )
        except ExpiredSignatureError:
            raise AuthenticationFailed("Token has expired")
        except JWTError as e:
            logger.debug(f"Rejected token: {e}")
            raise AuthenticationFailed("Invalid token")

    def authenticate(self, token: Optional[str]) -> Principal:
        if not token:
            raise AuthenticationRequired()

        claims = self.decode(token)
        user_id = claims.get("sub") or claims.get("userId")
        if not user_id:
            raise AuthenticationFailed("Missing user ID in token")

        permissions = claims.get("permissions") or []
        if not isinstance(permissions, (list, tuple)):
            permissions = []

        return Principal.build(
            id=user_id,
            system_role=claims.get("systemRole"),
            tenant_id=claims.get("tenantId"),
            tenant_role=claims.get("role"),
            permissions=permissions,
        )

    def authenticate_header(self, authorization: Optional[str]) -> Principal:
        """Authenticate from an ``Authorization: Bearer <token>`` header value."""
        if not authorization:
            raise AuthenticationRequired()
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise AuthenticationFailed("Invalid authorization header format")
        return self.authenticate(token.strip())
