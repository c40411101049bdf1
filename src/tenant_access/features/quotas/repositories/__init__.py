from .usage_provider import AsyncPGUsageProvider

__all__ = ["AsyncPGUsageProvider"]
