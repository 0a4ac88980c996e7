from __future__ import annotations

import logging
from typing import Any, Iterable

from pydantic import ValidationError

from ..errors import ConfigurationError, InvalidQuery, ParseError, UpstreamError
from ..llm import config as llm_config
from ..llm.config import LLMConfig
from ..llm.groq_client import parse_recommendations, request_ranking
from ..shops.config import DEFAULT_SEARCH_CONFIG, SearchConfig
from ..shops.models import Shop
from ..shops.search import search_shops, validate_point
from ..shops.store import ShopStore, get_shop_store
from .matcher import matches
from .models import Recommendation, RecommendationQuery, RecommendationResponse

logger = logging.getLogger(__name__)

FALLBACK_REASON = "Recommended nearby business"
POPULAR_NEARBY_REASON = "Popular nearby business"


def _validate(body: RecommendationQuery) -> tuple[str, float, float]:
    query = (body.query or "").strip()
    if not query or body.lat is None or body.lng is None:
        raise InvalidQuery("Query, latitude, and longitude are required")
    lat, lng = validate_point(body.lat, body.lng)
    return query, lat, lng


def _candidate_payload(shop: Shop) -> dict[str, Any]:
    return {
        "id": shop.id,
        "name": shop.name,
        "categories": shop.categories,
        "description": shop.description,
        "address": shop.address,
    }


def _from_shops(shops: Iterable[Shop], reason: str) -> list[Recommendation]:
    return [
        Recommendation(
            id=shop.id,
            name=shop.name,
            category=shop.categories[0] if shop.categories else "General",
            reason=reason,
        )
        for shop in shops
    ]


def _from_ranking(items: list[dict[str, Any]]) -> list[Recommendation]:
    recs: list[Recommendation] = []
    for item in items:
        raw_id = item.get("id")
        try:
            recs.append(Recommendation(
                id=str(raw_id) if raw_id is not None else None,
                name=item.get("name"),
                category=item.get("category") or "General",
                reason=item.get("reason") or "",
            ))
        except ValidationError:
            logger.debug("Dropping malformed ranking item: %r", item)
    return recs


def _dedupe(recs: list[Recommendation], limit: int) -> list[Recommendation]:
    seen: set[str] = set()
    unique: list[Recommendation] = []
    for rec in recs:
        if rec.name in seen:
            continue
        seen.add(rec.name)
        unique.append(rec)
    return unique[:limit]


def _rank(
    query: str,
    lat: float,
    lng: float,
    candidates: list[Shop],
    config: LLMConfig,
    search_config: SearchConfig,
) -> list[Recommendation]:
    synthesized = _from_shops(candidates[:search_config.max_recommendations], FALLBACK_REASON)
    if not config.enabled:
        return synthesized

    text = request_ranking(
        query, lat, lng, [_candidate_payload(s) for s in candidates], config=config,
    )
    try:
        recs = _from_ranking(parse_recommendations(text))
        if not recs:
            raise ParseError("ranking response had no usable entries")
    except ParseError:
        logger.warning("Could not parse ranking response, using nearby candidates", exc_info=True)
        return synthesized
    return recs


def _popular_nearby(
    lat: float,
    lng: float,
    store: ShopStore,
    search_config: SearchConfig,
    cause: Exception,
) -> list[Recommendation]:
    try:
        shops = search_shops(
            lat,
            lng,
            search_config.recommendation_radius_m,
            limit=search_config.fallback_size,
            store=store,
        )
    except Exception as exc:
        logger.error("Fallback proximity query failed", exc_info=True)
        raise UpstreamError(str(cause)) from exc
    return _from_shops(shops, POPULAR_NEARBY_REASON)


def recommend_shops(
    body: RecommendationQuery,
    config: LLMConfig | None = None,
    store: ShopStore | None = None,
    search_config: SearchConfig = DEFAULT_SEARCH_CONFIG,
) -> RecommendationResponse:
    """
    Top nearby shops for a natural-language query, with reasons.

    Nearby approved shops are narrowed with the category matcher, then ranked
    by the LLM. Unusable LLM output falls back to the first local matches; a
    failed LLM call falls back to the plain nearest shops. Only a failure of
    that last query reaches the caller, as ``UpstreamError``.
    """
    config = config or llm_config.DEFAULT_LLM_CONFIG
    store = store or get_shop_store()

    query, lat, lng = _validate(body)
    if config.enabled and not config.api_key:
        logger.error("GROQ_API_KEY not found in environment")
        raise ConfigurationError("Ranking service credential is not configured")

    try:
        nearby = search_shops(
            lat,
            lng,
            search_config.recommendation_radius_m,
            limit=search_config.recommendation_candidates,
            store=store,
        )
        candidates = [s for s in nearby if matches(query, s.categories)]
        logger.info(
            "Filtered %d nearby shops to %d matching %r", len(nearby), len(candidates), query,
        )
        if not candidates:
            return RecommendationResponse(recommendations=[])

        recs = _rank(query, lat, lng, candidates, config, search_config)
    except Exception as exc:
        logger.warning("Recommendation ranking failed, using nearest shops", exc_info=True)
        recs = _popular_nearby(lat, lng, store, search_config, exc)

    return RecommendationResponse(
        recommendations=_dedupe(recs, search_config.max_recommendations),
    )
