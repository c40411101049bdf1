"""Version information for tenant-access-core."""

__version__ = "0.1.0"
