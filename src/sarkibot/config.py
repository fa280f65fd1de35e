"""Environment-driven configuration.

All knobs are read from ``SARKIBOT_*`` environment variables. A few legacy
names (``OPENAI_API_KEY``, ``OPENAI_MODEL``) are still honoured and log a
one-time deprecation warning.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Tuple

logger = logging.getLogger(__name__)

_LEGACY_WARNED: set[str] = set()

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_ORACLE_TIMEOUT_S = 5.0
DEFAULT_MAX_TOKENS = 500


def _warn_legacy(legacy: str, new_name: str) -> None:
    if legacy in _LEGACY_WARNED:
        return
    _LEGACY_WARNED.add(legacy)
    logger.warning(
        "[config] legacy env var %s is deprecated; use %s",
        legacy,
        new_name,
    )


def _env_raw(name: str, *legacy: str) -> str:
    raw = str(os.getenv(name, "")).strip()
    if raw:
        return raw
    for legacy_name in legacy:
        legacy_raw = str(os.getenv(legacy_name, "")).strip()
        if legacy_raw:
            _warn_legacy(legacy_name, name)
            return legacy_raw
    return ""


def _env_flag(name: str, *legacy: str, default: bool = False) -> bool:
    raw = _env_raw(name, *legacy).strip().lower()
    if not raw:
        return bool(default)
    return raw in {"1", "true", "yes", "y", "on", "enable", "enabled"}


def _env_float(name: str, *legacy: str, default: float) -> float:
    raw = _env_raw(name, *legacy)
    if not raw:
        return float(default)
    try:
        return float(raw)
    except ValueError:
        logger.warning("[config] %s=%r is not a number; using %s", name, raw, default)
        return float(default)


def _env_list(name: str) -> Tuple[str, ...]:
    raw = _env_raw(name)
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class EngineConfig:
    """Runtime configuration for the oracle client and dialog engine.

    Attributes:
        base_url: OpenAI-compatible API root
        model: Model name sent with every completion request
        api_key: API key (empty for local OpenAI-compatible servers)
        oracle_timeout_seconds: Bounded wait for one oracle call
        max_tokens: Completion token cap
        combined_steps: Collect slot groups in one multi-slot turn
        extra_artists: Additional names for the artist de-identification check
    """

    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    api_key: str = ""
    oracle_timeout_seconds: float = DEFAULT_ORACLE_TIMEOUT_S
    max_tokens: int = DEFAULT_MAX_TOKENS
    combined_steps: bool = True
    extra_artists: Tuple[str, ...] = field(default_factory=tuple)


def load_config() -> EngineConfig:
    """Build an :class:`EngineConfig` from the current environment."""
    timeout = _env_float("SARKIBOT_ORACLE_TIMEOUT", default=DEFAULT_ORACLE_TIMEOUT_S)
    if timeout <= 0:
        logger.warning("[config] SARKIBOT_ORACLE_TIMEOUT must be positive; using default")
        timeout = DEFAULT_ORACLE_TIMEOUT_S

    return EngineConfig(
        base_url=_env_raw("SARKIBOT_LLM_BASE_URL") or DEFAULT_BASE_URL,
        model=_env_raw("SARKIBOT_LLM_MODEL", "OPENAI_MODEL") or DEFAULT_MODEL,
        api_key=_env_raw("SARKIBOT_LLM_API_KEY", "OPENAI_API_KEY"),
        oracle_timeout_seconds=timeout,
        max_tokens=int(_env_float("SARKIBOT_MAX_TOKENS", default=DEFAULT_MAX_TOKENS)),
        combined_steps=_env_flag("SARKIBOT_COMBINED_STEPS", default=True),
        extra_artists=_env_list("SARKIBOT_KNOWN_ARTISTS"),
    )
