from .data_scope_translator import DataScopeTranslator, default_translator, scope_for

__all__ = ["DataScopeTranslator", "default_translator", "scope_for"]
