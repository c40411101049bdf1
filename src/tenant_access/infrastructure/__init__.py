"""Infrastructure adapters for tenant-access-core."""
