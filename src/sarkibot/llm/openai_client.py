"""OpenAI-compatible chat-completions oracle.

Works against api.openai.com or any server exposing an OpenAI-compatible
``/v1/chat/completions`` endpoint (vLLM, llama.cpp server, ...).

The engine's latency contract is one attempt with a short ceiling, so the SDK
client is created with ``max_retries=0`` and the configured timeout.

Usage:
    >>> oracle = OpenAIOracle(model="gpt-4o-mini", api_key="sk-...")
    >>> text = oracle.extract('Kullanıcı şarkı türü seçiyor: "pop"', 0.3)

Requirements:
    pip install openai requests
"""

from __future__ import annotations

import logging
import os
import threading
import time
from typing import Optional

from sarkibot.config import DEFAULT_BASE_URL, DEFAULT_MAX_TOKENS, DEFAULT_ORACLE_TIMEOUT_S
from sarkibot.core.exceptions import OracleTransportError
from sarkibot.llm.base import OracleClient, clamp_temperature

logger = logging.getLogger(__name__)


class OpenAIOracle(OracleClient):
    """Oracle backed by the ``openai`` SDK.

    Attributes:
        base_url: API root (``/v1`` is appended when missing)
        model: Model name
        timeout_seconds: Bounded wait per call
        max_tokens: Completion token cap
    """

    def __init__(
        self,
        base_url: str = "",
        model: str = "",
        api_key: str = "",
        timeout_seconds: float = DEFAULT_ORACLE_TIMEOUT_S,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ):
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.model = (model or os.getenv("SARKIBOT_LLM_MODEL", "gpt-4o-mini")).strip()
        self.api_key = api_key or "EMPTY"
        self.timeout_seconds = float(timeout_seconds)
        self.max_tokens = int(max_tokens)

        self._lock = threading.Lock()
        self._client: Optional[object] = None

    def _api_base(self) -> str:
        api_base = self.base_url.rstrip("/")
        if not api_base.endswith("/v1"):
            api_base = f"{api_base}/v1"
        return api_base

    def _get_client(self):
        """Lazy-initialize the SDK client (thread-safe)."""
        if self._client is not None:
            return self._client
        with self._lock:
            if self._client is not None:
                return self._client
            from openai import OpenAI

            self._client = OpenAI(
                base_url=self._api_base(),
                api_key=self.api_key,
                timeout=self.timeout_seconds,
                max_retries=0,
            )
        return self._client

    def is_available(self, *, timeout_seconds: float = 1.5) -> bool:
        """Check if the endpoint answers ``GET /models``."""
        import requests

        try:
            r = requests.get(
                f"{self._api_base()}/models",
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=float(timeout_seconds),
            )
            return r.status_code == 200
        except requests.RequestException:
            return False

    def extract(self, prompt: str, temperature: float) -> str:
        """Single-shot completion of ``prompt``."""
        import openai

        client = self._get_client()
        t0 = time.perf_counter()
        try:
            completion = client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=clamp_temperature(temperature),
                max_tokens=self.max_tokens,
            )
        except openai.APITimeoutError as e:
            raise OracleTransportError(
                f"Oracle timeout after {self.timeout_seconds}s",
                timed_out=True,
                model=self.model,
            ) from e
        except openai.APIConnectionError as e:
            raise OracleTransportError(
                f"Oracle connection failed ({self.base_url})",
                model=self.model,
            ) from e
        except openai.APIStatusError as e:
            raise OracleTransportError(
                f"Oracle returned HTTP {e.status_code}",
                model=self.model,
                status_code=e.status_code,
            ) from e
        except openai.OpenAIError as e:
            raise OracleTransportError(f"Oracle call failed: {e}", model=self.model) from e

        elapsed_ms = int((time.perf_counter() - t0) * 1000)
        logger.debug(
            "oracle_call backend=%s model=%s latency_ms=%s",
            self.backend_name,
            self.model_name,
            elapsed_ms,
        )

        if not completion.choices:
            raise OracleTransportError("Oracle returned no choices", model=self.model)
        content = (completion.choices[0].message.content or "").strip()
        if not content:
            raise OracleTransportError("Oracle returned an empty answer", model=self.model)
        return content

    @property
    def model_name(self) -> str:
        return self.model

    @property
    def backend_name(self) -> str:
        return "openai"
