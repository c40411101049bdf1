from .tenant_directory import AsyncPGTenantDirectory, InMemoryTenantDirectory

__all__ = ["AsyncPGTenantDirectory", "InMemoryTenantDirectory"]
