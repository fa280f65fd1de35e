"""Oracle interface - the single seam between the engine and the LLM backend.

The engine only ever needs one operation from the natural-language oracle:
send a prompt with a sampling temperature, get text back within a bounded
time. Everything else (JSON decoding, validation, merging) happens locally.

Design goals:
- One narrow interface, easy to replace with a deterministic stub in tests
- Config-based backend selection
- Every backend failure surfaces as ``OracleTransportError``
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Protocol

from sarkibot.config import EngineConfig


class Oracle(Protocol):
    """Protocol for type checking (duck typing).

    Use this for type hints; test stubs only need ``extract``.
    """

    def extract(self, prompt: str, temperature: float) -> str:
        ...


class OracleClient(ABC):
    """Abstract base class for concrete oracle backends."""

    @abstractmethod
    def extract(self, prompt: str, temperature: float) -> str:
        """Send ``prompt`` and return the raw completion text.

        Args:
            prompt: Complete instruction text
            temperature: Sampling temperature in [0, 1]

        Returns:
            Completion text (may be anything; the sanitizer decides)

        Raises:
            OracleTransportError: timeout, connection failure, empty answer
        """
        pass

    @abstractmethod
    def is_available(self, *, timeout_seconds: float = 1.5) -> bool:
        """Check if the backend is reachable."""
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Current model name."""
        pass

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Backend type, e.g. 'openai'."""
        pass


def clamp_temperature(temperature: float) -> float:
    """Clamp a sampling temperature into [0, 1]."""
    try:
        value = float(temperature)
    except (TypeError, ValueError):
        return 0.0
    return max(0.0, min(1.0, value))


def create_client(
    backend: str = "openai",
    *,
    config: Optional[EngineConfig] = None,
) -> OracleClient:
    """Factory function to create an oracle client.

    Args:
        backend: 'openai' (any OpenAI-compatible endpoint)
        config: Engine configuration (defaults to ``load_config()``)

    Raises:
        ValueError: Unknown backend
    """
    backend = backend.lower().strip()

    if config is None:
        from sarkibot.config import load_config
        config = load_config()

    if backend in {"openai", "vllm"}:
        from sarkibot.llm.openai_client import OpenAIOracle
        return OpenAIOracle(
            base_url=config.base_url,
            model=config.model,
            api_key=config.api_key,
            timeout_seconds=config.oracle_timeout_seconds,
            max_tokens=config.max_tokens,
        )

    raise ValueError(f"Unknown backend: {backend}")
