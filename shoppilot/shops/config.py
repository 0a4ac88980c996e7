from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SearchConfig:
    recommendation_radius_m: float = 5000.0
    recommendation_candidates: int = 20
    fallback_size: int = 3
    max_recommendations: int = 3
    browse_radius_m: float = 5000.0
    default_page_size: int = 20
    max_page_size: int = 100


DEFAULT_SEARCH_CONFIG = SearchConfig()
