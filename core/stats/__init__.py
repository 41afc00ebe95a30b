"""Usage statistics package.

Provides aggregation of request, character, token and cost figures per provider.
"""

from __future__ import annotations

from core.stats.manager import StatsManager

__all__: list[str] = ["StatsManager"]
