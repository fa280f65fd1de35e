"""Oracle backends for sarkibot."""

from sarkibot.llm.base import Oracle, OracleClient, clamp_temperature, create_client

__all__ = [
    "Oracle",
    "OracleClient",
    "clamp_temperature",
    "create_client",
]
