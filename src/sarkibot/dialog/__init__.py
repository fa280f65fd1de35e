"""Turn-level dialog handling for song orders."""

from sarkibot.dialog.engine import SlotFillingEngine
from sarkibot.dialog.fallback import FallbackResponder
from sarkibot.dialog.flow import next_step, question_for
from sarkibot.dialog.steps import Step, TurnOutcome

__all__ = [
    "FallbackResponder",
    "SlotFillingEngine",
    "Step",
    "TurnOutcome",
    "next_step",
    "question_for",
]
