"""Core error taxonomy."""

from sarkibot.core.exceptions import (
    ErrorContext,
    MalformedOracleOutputError,
    OracleTransportError,
    SarkiBotError,
    StyleContractViolationError,
    UndeterminedClassificationError,
    ValidationError,
    generate_turn_id,
)

__all__ = [
    "ErrorContext",
    "MalformedOracleOutputError",
    "OracleTransportError",
    "SarkiBotError",
    "StyleContractViolationError",
    "UndeterminedClassificationError",
    "ValidationError",
    "generate_turn_id",
]
