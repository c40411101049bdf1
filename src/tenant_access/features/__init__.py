"""Feature packages of tenant-access-core."""
