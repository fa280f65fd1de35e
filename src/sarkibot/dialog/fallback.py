"""FallbackResponder - terminal handler for every failed turn.

Returns the input state untouched together with a conversational re-ask of
the current question (closed vocabulary spelled out). Validation failures
use the gate's own message, which names the bound. Never raises.
"""

from __future__ import annotations

import logging
from typing import Optional

from sarkibot.core.exceptions import (
    MalformedOracleOutputError,
    OracleTransportError,
    SarkiBotError,
    StyleContractViolationError,
    UndeterminedClassificationError,
    ValidationError,
)
from sarkibot.dialog.flow import question_for
from sarkibot.dialog.steps import Step, TurnOutcome
from sarkibot.i18n.messages import MessageCode, tr
from sarkibot.nlu.types import PartialOrderState

logger = logging.getLogger(__name__)

_LAST_RESORT = (
    "Kusura bakmayın, tam anlayamadım 😊 Son mesajınızı biraz farklı yazabilir misiniz?"
)


def error_code(error: Optional[BaseException]) -> str:
    """Short code describing why a turn fell back."""
    if isinstance(error, MalformedOracleOutputError):
        return "malformed_output"
    if isinstance(error, OracleTransportError):
        return "oracle_timeout" if error.timed_out else "oracle_unavailable"
    if isinstance(error, StyleContractViolationError):
        return "style_violation"
    if isinstance(error, ValidationError):
        return f"validation_{error.field_name or 'failed'}"
    if isinstance(error, UndeterminedClassificationError):
        return "undetermined"
    return "unknown"


class FallbackResponder:
    """Deterministic, oracle-free response for a failed turn."""

    def message_for(self, step: Step, state: PartialOrderState, error: Optional[BaseException] = None) -> str:
        if isinstance(error, ValidationError) and error.user_message:
            return error.user_message
        question = question_for(step, state)
        return f"{tr(MessageCode.DID_NOT_UNDERSTAND)}\n\n{question}".strip()

    def respond(
        self,
        step: Step,
        state: PartialOrderState,
        error: Optional[BaseException] = None,
    ) -> TurnOutcome:
        """Re-ask ``step`` and hand back ``state`` unchanged."""
        if isinstance(error, SarkiBotError):
            error.log()
        elif error is not None:
            logger.warning("[fallback] step=%s unexpected %s: %s", step.value, type(error).__name__, error)

        try:
            message = self.message_for(step, state, error)
        except Exception as e:  # message rendering must not break the turn
            logger.error("[fallback] could not render re-ask for %s: %s", step.value, e)
            message = _LAST_RESORT

        return TurnOutcome(
            state=state,
            response=message,
            step=step,
            next_step=step,
            accepted=False,
            error_code=error_code(error),
        )
