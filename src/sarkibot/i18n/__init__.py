"""Turkish user-facing messages."""

from sarkibot.i18n.messages import MessageCode, summarize_order, tr

__all__ = ["MessageCode", "summarize_order", "tr"]
