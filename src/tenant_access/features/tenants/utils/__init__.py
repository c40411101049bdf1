from .encryption import (
    PasswordEncryption,
    DatabaseCredentials,
    FallbackCredentials,
    CredentialResolver,
)

__all__ = [
    "PasswordEncryption",
    "DatabaseCredentials",
    "FallbackCredentials",
    "CredentialResolver",
]
