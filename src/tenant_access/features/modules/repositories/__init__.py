from .module_access import AsyncPGModuleAccessProvider, InMemoryModuleAccessProvider

__all__ = ["AsyncPGModuleAccessProvider", "InMemoryModuleAccessProvider"]
