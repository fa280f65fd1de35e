"""Typed exceptions + correlation ID for the slot-filling engine.

Every failure the engine can recover from is one of these types, so the
dialog layer catches ``SarkiBotError`` and nothing broader.

Exception hierarchy::

    SarkiBotError
    ├── MalformedOracleOutputError      : oracle output could not be decoded
    ├── OracleTransportError            : timeout / connection failure
    ├── StyleContractViolationError     : style text leaks a name or vocal term
    ├── ValidationError                 : free-text slot violates a length bound
    └── UndeterminedClassificationError : no keyword matched a closed question

Correlation ID::

    Every turn gets a ``turn_id`` (``t-<8 hex>``) that appears in the error
    context and in the log lines emitted during that turn.

Usage::

    from sarkibot.core.exceptions import MalformedOracleOutputError, generate_turn_id

    turn_id = generate_turn_id()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedOracleOutputError(
            "Oracle returned invalid JSON",
            turn_id=turn_id,
            raw_text=raw,
        ) from e
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

__all__ = [
    "SarkiBotError",
    "MalformedOracleOutputError",
    "OracleTransportError",
    "StyleContractViolationError",
    "ValidationError",
    "UndeterminedClassificationError",
    "generate_turn_id",
    "ErrorContext",
]


# ── Correlation ID ────────────────────────────────────────────

def generate_turn_id() -> str:
    """Generate a short turn correlation ID: ``t-<8-hex>``."""
    return f"t-{uuid.uuid4().hex[:8]}"


# ── Error context ─────────────────────────────────────────────

@dataclass
class ErrorContext:
    """Structured context attached to every engine exception."""

    turn_id: str = ""
    phase: str = ""          # "sanitize" | "oracle" | "extract" | "validate" | "classify"
    component: str = ""
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_log_dict(self) -> Dict[str, Any]:
        """Flatten to dict for structured logging."""
        d: Dict[str, Any] = {
            "turn_id": self.turn_id,
            "phase": self.phase,
            "component": self.component,
            "timestamp": self.timestamp,
        }
        d.update(self.metadata)
        return d


# ── Base exception ────────────────────────────────────────────

class SarkiBotError(Exception):
    """Base exception for all recoverable engine errors."""

    def __init__(
        self,
        message: str = "",
        *,
        turn_id: str = "",
        phase: str = "",
        component: str = "",
        context: Optional[ErrorContext] = None,
        **metadata: Any,
    ) -> None:
        self.error_message = message
        self.context = context or ErrorContext(
            turn_id=turn_id,
            phase=phase,
            component=component,
            metadata=metadata,
        )
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = []
        if self.context.turn_id:
            parts.append(f"[turn:{self.context.turn_id}]")
        if self.context.phase:
            parts.append(f"[{self.context.phase}]")
        parts.append(self.error_message)
        return " ".join(parts)

    def log(self, level: int = logging.WARNING) -> None:
        """Emit a structured log line for this error."""
        logger.log(
            level,
            "%s: %s | context=%s",
            type(self).__name__,
            self.error_message,
            self.context.to_log_dict(),
            exc_info=(level >= logging.ERROR),
        )


# ── Typed exceptions ─────────────────────────────────────────

class MalformedOracleOutputError(SarkiBotError):
    """Oracle output could not be decoded into the expected payload.

    Attributes
    ----------
    raw_text:
        The raw oracle output that failed to decode (truncated).
    reason:
        Short code: ``empty_output``, ``json_decode_error``,
        ``json_not_object``, ``schema_mismatch``.
    """

    def __init__(
        self,
        message: str = "Oracle output could not be decoded",
        *,
        turn_id: str = "",
        raw_text: str = "",
        reason: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message,
            turn_id=turn_id,
            phase="sanitize",
            component="sanitizer.decode",
            raw_text=raw_text[:200],
            reason=reason,
            **kwargs,
        )
        self.raw_text = raw_text[:200]
        self.reason = reason


class OracleTransportError(SarkiBotError):
    """The oracle could not be reached or did not answer in time."""

    def __init__(
        self,
        message: str = "Oracle call failed",
        *,
        turn_id: str = "",
        timed_out: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message,
            turn_id=turn_id,
            phase="oracle",
            component="oracle.extract",
            timed_out=timed_out,
            **kwargs,
        )
        self.timed_out = timed_out


class StyleContractViolationError(SarkiBotError):
    """A style description names an artist or states a vocal gender.

    Attributes
    ----------
    field_name:
        Payload field that carried the offending text.
    violation:
        What was found (the artist name or the vocal phrase).
    """

    def __init__(
        self,
        message: str = "Style description violates de-identification contract",
        *,
        turn_id: str = "",
        field_name: str = "",
        violation: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message,
            turn_id=turn_id,
            phase="extract",
            component="style_guard.check",
            field_name=field_name,
            violation=violation,
            **kwargs,
        )
        self.field_name = field_name
        self.violation = violation


class ValidationError(SarkiBotError):
    """A free-text slot violates a hard length bound.

    ``user_message`` is the Turkish text shown to the user; it always states
    the bound and, where relevant, the measured length.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        *,
        turn_id: str = "",
        field_name: str = "",
        length: int = 0,
        limit: int = 0,
        user_message: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message,
            turn_id=turn_id,
            phase="validate",
            component=f"validation.{field_name}",
            field_name=field_name,
            length=length,
            limit=limit,
            **kwargs,
        )
        self.field_name = field_name
        self.length = length
        self.limit = limit
        self.user_message = user_message


class UndeterminedClassificationError(SarkiBotError):
    """No keyword of a closed question matched the user's turn."""

    def __init__(
        self,
        message: str = "No keyword matched",
        *,
        turn_id: str = "",
        question: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message,
            turn_id=turn_id,
            phase="classify",
            component=f"keywords.{question}",
            question=question,
            **kwargs,
        )
        self.question = question
