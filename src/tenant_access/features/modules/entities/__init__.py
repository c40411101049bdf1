from .protocols import ModuleAccessProvider

__all__ = ["ModuleAccessProvider"]
