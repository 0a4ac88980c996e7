from __future__ import annotations

import json
import logging
from typing import Any

from groq import Groq

from ..errors import ConfigurationError, ParseError
from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful local discovery assistant that recommends the best "
    "nearby shops based on quality, proximity, and popularity."
)

RESPONSE_FORMAT = (
    "Respond with ONLY a JSON array in this exact format:\n"
    "[\n"
    '  {"id": "shop_id", "name": "shop name", "category": "shop category", '
    '"reason": "why this shop matches the user\'s needs"}\n'
    "]"
)


class RankingServiceError(Exception):
    """The ranking call itself failed (network, timeout, non-2xx, bad envelope)."""


def _build_user_message(
    query: str,
    lat: float,
    lng: float,
    candidates: list[dict[str, Any]],
) -> str:
    lines = [
        f'User query: "{query}"',
        f"User location: lat={lat}, lng={lng}",
        "",
        "Available nearby shops:",
        json.dumps(candidates),
        "",
        "Based on the user's query, recommend the top 3 most relevant shops. "
        'The user might ask in natural language (like "I want food" or '
        '"where can I eat"), so interpret their intent.',
        "",
        RESPONSE_FORMAT,
    ]
    return "\n".join(lines)


def request_ranking(
    query: str,
    lat: float,
    lng: float,
    candidates: list[dict[str, Any]],
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> str:
    """
    Ask Groq to pick and justify the best candidates for ``query``.

    Single attempt, bounded by ``config.timeout``. Returns the raw completion
    text; raises ``ConfigurationError`` when no API key is configured and
    ``RankingServiceError`` for anything that goes wrong on the wire.
    """
    if not config.api_key:
        raise ConfigurationError("GROQ_API_KEY is not set")

    try:
        client = Groq(api_key=config.api_key, timeout=config.timeout, max_retries=0)
        response = client.chat.completions.create(
            model=config.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": _build_user_message(query, lat, lng, candidates),
                },
            ],
            max_tokens=config.max_tokens,
            temperature=config.temperature,
        )
        content = response.choices[0].message.content or ""
    except Exception as exc:
        raise RankingServiceError(str(exc)) from exc

    logger.debug("Ranking response: %s", content)
    return content


def _first_json_array(text: str) -> list | None:
    decoder = json.JSONDecoder()
    idx = text.find("[")
    while idx != -1:
        try:
            value, _ = decoder.raw_decode(text, idx)
        except ValueError:
            value = None
        if isinstance(value, list):
            return value
        idx = text.find("[", idx + 1)
    return None


def parse_recommendations(text: str) -> list[dict[str, Any]]:
    """
    Pull the recommendation array out of a completion.

    Tries the whole text as JSON first, then the first well-formed ``[...]``
    inside it (models like to wrap JSON in prose or code fences). Raises
    ``ParseError`` unless the result is a non-empty array of objects.
    """
    try:
        parsed = json.loads(text)
    except ValueError:
        parsed = _first_json_array(text)
        if parsed is None:
            raise ParseError("no JSON array found in ranking response")

    if not isinstance(parsed, list) or not parsed:
        raise ParseError("ranking response is not a non-empty array")

    items = [item for item in parsed if isinstance(item, dict)]
    if not items:
        raise ParseError("ranking response array holds no objects")
    return items
