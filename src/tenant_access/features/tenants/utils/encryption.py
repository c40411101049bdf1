"""Tenant database credential handling.

Tenant database passwords are stored as Fernet tokens in the control plane.
The Fernet key is derived from ``DB_ENCRYPTION_KEY`` with PBKDF2 so existing
provisioning tooling can keep encrypting with the same secret.
"""

import base64
import logging
from dataclasses import dataclass, field
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..entities.tenant import Tenant

logger = logging.getLogger(__name__)

# Fixed salt shared with the provisioning side
_KDF_SALT = b"NeoMultiTenant2024"
_KDF_ITERATIONS = 100000


class PasswordEncryption:
    """Encrypt and decrypt tenant database passwords."""

    def __init__(self, encryption_key: str):
        if not encryption_key:
            raise ValueError("An encryption key is required")
        self.cipher = self._get_cipher(encryption_key)

    @staticmethod
    def _get_cipher(encryption_key: str) -> Fernet:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=_KDF_SALT,
            iterations=_KDF_ITERATIONS,
        )
        derived_key = base64.urlsafe_b64encode(kdf.derive(encryption_key.encode("utf-8")))
        return Fernet(derived_key)

    def encrypt_password(self, password: str) -> str:
        if not password:
            return ""
        return self.cipher.encrypt(password.encode("utf-8")).decode("utf-8")

    def decrypt_password(self, encrypted_password: str) -> str:
        """Decrypt a Fernet token.

        Raises:
            ValueError: if the token is corrupt or was encrypted with another key
        """
        if not encrypted_password:
            return ""
        try:
            return self.cipher.decrypt(encrypted_password.encode("utf-8")).decode("utf-8")
        except InvalidToken as e:
            raise ValueError("Failed to decrypt password") from e

    @staticmethod
    def is_encrypted(value: Optional[str]) -> bool:
        # Fernet tokens start with 'gAAAAA'
        return bool(value) and value.startswith("gAAAAA")


@dataclass(frozen=True)
class DatabaseCredentials:
    """Resolved connection coordinates for one tenant database."""

    host: str
    port: int
    database: str
    user: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class FallbackCredentials:
    """Credentials used for tenants provisioned without dedicated ones."""

    host: str = "localhost"
    port: int = 5432
    user: str = "postgres"
    password: str = field(default="postgres", repr=False)


class CredentialResolver:
    """Turns tenant metadata into connection credentials."""

    def __init__(self, encryption: PasswordEncryption, fallback: Optional[FallbackCredentials] = None):
        self._encryption = encryption
        self._fallback = fallback or FallbackCredentials()

    def resolve(self, tenant: Tenant) -> DatabaseCredentials:
        """Build credentials for ``tenant``.

        Raises:
            ValueError: if the tenant has no database name or its password
                cannot be decrypted
        """
        if not tenant.database_name:
            raise ValueError(f"Tenant {tenant.id} has no database name")

        if not tenant.has_dedicated_credentials:
            logger.warning(f"Tenant {tenant.id} missing database credentials, using fallback credentials")
            return DatabaseCredentials(
                host=tenant.host or self._fallback.host,
                port=int(tenant.port or self._fallback.port),
                database=tenant.database_name,
                user=self._fallback.user,
                password=self._fallback.password,
            )

        password = tenant.credentials_ref
        if self._encryption.is_encrypted(password):
            password = self._encryption.decrypt_password(password)

        return DatabaseCredentials(
            host=tenant.host,
            port=int(tenant.port),
            database=tenant.database_name,
            user=tenant.db_username,
            password=password,
        )
