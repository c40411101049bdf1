"""Modules feature.

Whether a tenant has a product module (crm, orders, files, ...) enabled,
either through its subscription plan or through a direct assignment.
"""

from .entities import ModuleAccessProvider
from .repositories import AsyncPGModuleAccessProvider, InMemoryModuleAccessProvider

__all__ = [
    "ModuleAccessProvider",
    "AsyncPGModuleAccessProvider",
    "InMemoryModuleAccessProvider",
]
