"""Translation cache package.

Provides caching functionality for translation results and language detection.
"""

from __future__ import annotations

from core.cache.manager import TranslationCacheManager

__all__: list[str] = ["TranslationCacheManager"]
