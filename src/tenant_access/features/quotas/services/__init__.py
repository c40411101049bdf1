from .quota_service import QuotaService

__all__ = ["QuotaService"]
