"""ResponseSanitizer - the only gate between raw oracle text and the engine.

Decoding is strict and binary:

1. Strip a leading fence line (three backticks, optionally tagged ``json``)
   and a trailing fence line.
2. Decode what remains as exactly one JSON object. Prose before or after the
   object, truncated output and arrays all fail.
3. Validate the object against the payload model of the current contract.

There is no brace scanning and no repair; any failure raises
``MalformedOracleOutputError`` and the caller falls back.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Type, TypeVar

from pydantic import ValidationError as PydanticValidationError

from sarkibot.core.exceptions import MalformedOracleOutputError
from sarkibot.nlu.schemas import ExtractionPayload

logger = logging.getLogger(__name__)

PayloadT = TypeVar("PayloadT", bound=ExtractionPayload)

_LEADING_FENCE = re.compile(r"^\s*```[A-Za-z0-9_-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?[ \t]*```\s*$")


def strip_fences(text: str) -> str:
    """Remove a leading/trailing fenced-code-block delimiter, if present."""
    stripped = _LEADING_FENCE.sub("", text or "", count=1)
    stripped = _TRAILING_FENCE.sub("", stripped, count=1)
    return stripped.strip()


class ResponseSanitizer:
    """Decode raw oracle output into a typed payload or fail explicitly."""

    def decode_object(self, raw: str, *, turn_id: str = "") -> dict[str, Any]:
        """Strip fences and decode a single JSON object."""
        text = strip_fences(raw)
        if not text:
            raise MalformedOracleOutputError(
                "Oracle returned empty output",
                turn_id=turn_id,
                raw_text=raw or "",
                reason="empty_output",
            )

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedOracleOutputError(
                f"Oracle output is not valid JSON: {e.msg}",
                turn_id=turn_id,
                raw_text=raw,
                reason="json_decode_error",
            ) from e

        if not isinstance(data, dict):
            raise MalformedOracleOutputError(
                f"Oracle output is a {type(data).__name__}, expected an object",
                turn_id=turn_id,
                raw_text=raw,
                reason="json_not_object",
            )
        return data

    def sanitize(
        self,
        raw: str,
        payload_model: Type[PayloadT],
        *,
        turn_id: str = "",
    ) -> PayloadT:
        """Decode ``raw`` into ``payload_model``.

        Raises:
            MalformedOracleOutputError: on any decoding or schema failure
        """
        logger.debug("[sanitize] raw=%r", (raw or "")[:200])
        data = self.decode_object(raw, turn_id=turn_id)

        try:
            return payload_model.model_validate(data)
        except PydanticValidationError as e:
            raise MalformedOracleOutputError(
                f"Oracle output does not match {payload_model.__name__}: "
                f"{e.error_count()} error(s)",
                turn_id=turn_id,
                raw_text=raw,
                reason="schema_mismatch",
            ) from e
