"""Core managers for TransRouter.

This package contains the translation manager with its provider registry, the result cache,
the usage statistics aggregator, and the speech synthesis manager.
"""

from core.cache.manager import TranslationCacheManager
from core.stats.manager import StatsManager
from core.trans.manager import TransManager
from core.trans.registry import AdapterRegistry, create_default_registry
from core.tts.manager import SpeechManager
from core.version import VERSION

__all__: list[str] = [
    "VERSION",
    "AdapterRegistry",
    "SpeechManager",
    "StatsManager",
    "TransManager",
    "TranslationCacheManager",
    "create_default_registry",
]
