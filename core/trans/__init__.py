"""Translation routing and provider interfaces.

This package provides translation through pluggable provider adapters, with a registry to create them,
a manager that selects providers and falls back between them, and the shared exception hierarchy.
"""

from core.trans.interface import (
    AllProvidersFailedError,
    InvalidCredentialsError,
    ManagerNotInitializedError,
    NoProviderAvailableError,
    NotSupportedLanguagesError,
    ProviderUnavailableError,
    TransInterface,
    TranslateExceptionError,
    TranslationNetworkError,
    TranslationQuotaExceededError,
    TranslationServerError,
    TranslationTimeoutError,
    UnknownProviderError,
)
from core.trans.manager import ManagerState, TransManager
from core.trans.registry import AdapterRegistry, create_default_registry

__all__: list[str] = [
    "AdapterRegistry",
    "AllProvidersFailedError",
    "InvalidCredentialsError",
    "ManagerNotInitializedError",
    "ManagerState",
    "NoProviderAvailableError",
    "NotSupportedLanguagesError",
    "ProviderUnavailableError",
    "TransInterface",
    "TransManager",
    "TranslateExceptionError",
    "TranslationNetworkError",
    "TranslationQuotaExceededError",
    "TranslationServerError",
    "TranslationTimeoutError",
    "UnknownProviderError",
    "create_default_registry",
]
