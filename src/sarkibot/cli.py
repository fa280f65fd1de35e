"""sarkibot CLI - run an order conversation in the terminal.

Usage:
  sarkibot                    # OpenAI-compatible oracle from SARKIBOT_* env
  sarkibot --single-steps     # one slot per question
  sarkibot --offline          # no oracle: every extraction falls back
  sarkibot --show-state       # print the slot state after each turn
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import Optional

from sarkibot.config import load_config
from sarkibot.core.exceptions import OracleTransportError
from sarkibot.dialog.engine import SlotFillingEngine
from sarkibot.dialog.flow import question_for
from sarkibot.dialog.steps import Step
from sarkibot.i18n.messages import summarize_order
from sarkibot.nlu.types import PartialOrderState


# ANSI colors
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    CYAN = "\033[36m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"


class OfflineOracle:
    """Oracle stand-in that is never reachable."""

    def extract(self, prompt: str, temperature: float) -> str:
        raise OracleTransportError("offline mode: no oracle configured")


def _bot(text: str) -> None:
    if text:
        print(f"{Colors.CYAN}🎵 {text}{Colors.RESET}\n")


def run_conversation(engine: SlotFillingEngine, *, show_state: bool = False) -> int:
    state = PartialOrderState.empty()
    step = engine.first_step(state)
    _bot(question_for(step, state))

    while step != Step.DONE:
        try:
            text = input(f"{Colors.BOLD}Siz:{Colors.RESET} ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return 130
        if not text:
            continue
        if text.lower() in {"exit", "quit", "çık", "çıkış"}:
            return 0

        outcome = engine.handle(step, text, state)
        state = outcome.state
        _bot(outcome.response)

        if show_state:
            print(f"{Colors.DIM}{json.dumps(state.to_dict(), ensure_ascii=False)}{Colors.RESET}")

        if outcome.next_step != step and outcome.next_step != Step.DONE:
            _bot(question_for(outcome.next_step, state))
        step = outcome.next_step

    print(f"{Colors.GREEN}{summarize_order(state)}{Colors.RESET}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="sarkibot",
        description="Şarkı siparişi sohbeti (terminal)",
    )
    parser.add_argument("--offline", action="store_true", help="Oracle olmadan çalış (her çıkarım fallback'e düşer)")
    parser.add_argument("--single-steps", action="store_true", help="Her bilgiyi ayrı soruyla topla")
    parser.add_argument("--model", default=None, help="Model adı (SARKIBOT_LLM_MODEL yerine)")
    parser.add_argument("--base-url", default=None, help="OpenAI-uyumlu API adresi (SARKIBOT_LLM_BASE_URL yerine)")
    parser.add_argument("--show-state", action="store_true", help="Her turdan sonra slot durumunu yazdır")
    parser.add_argument("--debug", action="store_true", help="Debug logları aç")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config()
    overrides = {}
    if args.model:
        overrides["model"] = args.model
    if args.base_url:
        overrides["base_url"] = args.base_url
    if args.single_steps:
        overrides["combined_steps"] = False
    if overrides:
        config = replace(config, **overrides)

    oracle: Optional[OfflineOracle] = OfflineOracle() if args.offline else None
    engine = SlotFillingEngine.from_config(config, oracle=oracle)

    if not args.offline:
        client = engine.extractor.oracle
        if hasattr(client, "is_available") and not client.is_available():
            print(
                f"{Colors.YELLOW}⚠️ Oracle'a ulaşılamıyor ({config.base_url}); "
                f"cevaplar fallback ile gelecek.{Colors.RESET}",
                file=sys.stderr,
            )

    return run_conversation(engine, show_state=args.show_state)


if __name__ == "__main__":
    raise SystemExit(main())
