from .connection_router import TenantConnectionRouter
from .handle_factory import AsyncPGHandleFactory

__all__ = ["TenantConnectionRouter", "AsyncPGHandleFactory"]
