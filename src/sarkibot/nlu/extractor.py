"""SlotExtractor - one oracle round trip per turn.

Pipeline for a single extraction::

    contract + turn + state
        → render_prompt
        → oracle.extract(prompt, temperature)     (bounded wait, no retries)
        → ResponseSanitizer.sanitize(raw, payload model)
        → StyleGuard.check(artistStyleDescription)
        → ExtractionResult

Any transport problem surfaces as ``OracleTransportError``; a bad payload as
``MalformedOracleOutputError``; a leaked artist name or vocal term as
``StyleContractViolationError``. The caller falls back on all three.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from sarkibot.core.exceptions import OracleTransportError, SarkiBotError
from sarkibot.llm.base import Oracle, clamp_temperature
from sarkibot.nlu.contracts import ExtractionContract, render_prompt
from sarkibot.nlu.sanitizer import ResponseSanitizer
from sarkibot.nlu.schemas import ExtractionPayload
from sarkibot.nlu.style_guard import StyleGuard
from sarkibot.nlu.types import ExtractionResult, PartialOrderState

logger = logging.getLogger(__name__)


class SlotExtractor:
    """Issue contract-driven extraction requests to the oracle."""

    def __init__(
        self,
        oracle: Oracle,
        *,
        sanitizer: Optional[ResponseSanitizer] = None,
        style_guard: Optional[StyleGuard] = None,
    ) -> None:
        self.oracle = oracle
        self.sanitizer = sanitizer or ResponseSanitizer()
        self.style_guard = style_guard or StyleGuard()

    def build_prompt(
        self,
        contract: ExtractionContract,
        message: str,
        state: Optional[PartialOrderState] = None,
    ) -> str:
        return render_prompt(contract, message, state)

    def _call_oracle(self, prompt: str, temperature: float, *, turn_id: str) -> str:
        try:
            return self.oracle.extract(prompt, clamp_temperature(temperature))
        except SarkiBotError as e:
            if not e.context.turn_id:
                e.context.turn_id = turn_id
            raise
        except TimeoutError as e:
            raise OracleTransportError(
                "Oracle call timed out",
                turn_id=turn_id,
                timed_out=True,
            ) from e
        except Exception as e:
            raise OracleTransportError(
                f"Oracle call failed: {type(e).__name__}: {e}",
                turn_id=turn_id,
            ) from e

    def extract_payload(
        self,
        contract: ExtractionContract,
        message: str,
        state: Optional[PartialOrderState] = None,
        *,
        turn_id: str = "",
    ) -> ExtractionPayload:
        """Run one extraction and return the validated payload model.

        Raises:
            OracleTransportError: timeout or transport failure
            MalformedOracleOutputError: undecodable or wrongly shaped output
            StyleContractViolationError: style text names an artist / vocal
        """
        prompt = self.build_prompt(contract, message, state)
        logger.debug(
            "[extract] contract=%s turn=%s prompt_chars=%d",
            contract.name.value,
            turn_id,
            len(prompt),
        )

        t0 = time.perf_counter()
        raw = self._call_oracle(prompt, contract.temperature, turn_id=turn_id)
        elapsed_ms = int((time.perf_counter() - t0) * 1000)

        payload = self.sanitizer.sanitize(raw, contract.payload_model, turn_id=turn_id)
        if contract.has_style_field:
            self.style_guard.check(
                getattr(payload, "artist_style_description", None),
                turn_id=turn_id,
            )

        logger.info(
            "[extract] contract=%s turn=%s ok in %dms",
            contract.name.value,
            turn_id,
            elapsed_ms,
        )
        return payload

    def extract(
        self,
        contract: ExtractionContract,
        message: str,
        state: Optional[PartialOrderState] = None,
        *,
        turn_id: str = "",
    ) -> ExtractionResult:
        """Run one extraction and return the slot values it produced."""
        payload = self.extract_payload(contract, message, state, turn_id=turn_id)
        return payload.to_result()
