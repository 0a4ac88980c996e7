from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# .env sits next to pyproject.toml
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_seconds(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        value = math.nan
    if not math.isfinite(value) or value <= 0:
        logger.error("%s=%r is not a positive number of seconds, using %s", name, raw, default)
        return default
    return value


@dataclass(frozen=True)
class LLMConfig:
    """
    Settings for the shop-ranking completion call.

    ``api_key`` is the ranking-service credential; with ``enabled`` set and
    no key, recommendation requests fail with a configuration error. With
    ``enabled`` off, recommendations are served from local matches only.
    """

    api_key: str = os.getenv("GROQ_API_KEY", "")
    model: str = os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")
    timeout: float = _env_seconds("RANKING_TIMEOUT_SECONDS", 10.0)
    max_tokens: int = 1024
    temperature: float = 0.3
    enabled: bool = _env_flag("RANKING_ENABLED", True)


DEFAULT_LLM_CONFIG = LLMConfig()
