from .queries import BASIC_HEALTH_CHECK

__all__ = ["BASIC_HEALTH_CHECK"]
