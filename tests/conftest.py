from __future__ import annotations

import json
import socket
import threading
import time
from collections import deque
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Iterable, Union

import pytest


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run tests marked with @pytest.mark.integration (live oracle).",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-integration"):
        return

    deselected: list[pytest.Item] = []
    selected: list[pytest.Item] = []
    for item in items:
        if item.get_closest_marker("integration"):
            deselected.append(item)
        else:
            selected.append(item)

    if deselected:
        config.hook.pytest_deselected(items=deselected)
        items[:] = selected


# ─────────────────────────────────────────────────────────────────
# Deterministic oracle
# ─────────────────────────────────────────────────────────────────


def payload(**fields: Any) -> str:
    """JSON completion text as the oracle would return it."""
    fields.setdefault("response", "Tamam!")
    return json.dumps(fields, ensure_ascii=False)


class StubOracle:
    """Queue of canned completions (or exceptions) with call recording."""

    def __init__(self, replies: Iterable[Union[str, BaseException]] = ()) -> None:
        self.replies = deque(replies)
        self.calls: list[tuple[str, float]] = []

    def queue(self, *replies: Union[str, BaseException]) -> "StubOracle":
        self.replies.extend(replies)
        return self

    def extract(self, prompt: str, temperature: float) -> str:
        self.calls.append((prompt, temperature))
        if not self.replies:
            raise AssertionError("unexpected oracle call")
        reply = self.replies.popleft()
        if isinstance(reply, BaseException):
            raise reply
        return reply

    @property
    def last_prompt(self) -> str:
        return self.calls[-1][0]


@pytest.fixture
def stub_oracle() -> StubOracle:
    return StubOracle()


@pytest.fixture
def engine(stub_oracle):
    from sarkibot.dialog.engine import SlotFillingEngine
    return SlotFillingEngine(stub_oracle, combined_steps=True)


@pytest.fixture
def single_engine(stub_oracle):
    from sarkibot.dialog.engine import SlotFillingEngine
    return SlotFillingEngine(stub_oracle, combined_steps=False)


@pytest.fixture
def empty_state():
    from sarkibot.nlu.types import PartialOrderState
    return PartialOrderState.empty()


@pytest.fixture
def settings_state():
    """Song settings complete, recipient onwards missing."""
    from sarkibot.nlu.types import PartialOrderState, Slot, Vocal
    return PartialOrderState(
        {
            Slot.SONG_TYPE: "Pop",
            Slot.SONG_STYLE: "Romantik",
            Slot.VOCAL: Vocal.FEMALE,
        }
    )


@pytest.fixture
def ready_state(settings_state):
    """Everything collected except confirmation."""
    from sarkibot.nlu.types import Slot
    return settings_state.with_values(
        {
            Slot.RECIPIENT_RELATION: "Sevgilim",
            Slot.INCLUDE_NAME: True,
            Slot.RECIPIENT_NAME: "Ayşe",
            Slot.STORY: "İlk kez bir yağmurlu günde tanıştık ve o günden beri hep birlikteyiz.",
            Slot.NOTES: "",
        }
    )


# ─────────────────────────────────────────────────────────────────
# OpenAI-compatible mock server
# ─────────────────────────────────────────────────────────────────


class _OpenAIMockHandler(BaseHTTPRequestHandler):
    server_version = "sarkibot-oracle-mock/1.0"

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A003
        # Keep pytest output clean.
        return

    def _send_json(self, status: int, body: dict[str, Any]) -> None:
        data = json.dumps(body).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def do_GET(self) -> None:  # noqa: N802
        if self.path.rstrip("/") == "/v1/models":
            self._send_json(
                200,
                {
                    "object": "list",
                    "data": [{"id": self.server.model_name, "object": "model", "owned_by": "mock"}],
                },
            )
            return
        self._send_json(404, {"error": {"message": "not found"}})

    def do_POST(self) -> None:  # noqa: N802
        if self.path.rstrip("/") != "/v1/chat/completions":
            self._send_json(404, {"error": {"message": "not found"}})
            return

        length = int(self.headers.get("Content-Length", "0") or "0")
        raw = self.rfile.read(length) if length > 0 else b"{}"
        req = json.loads(raw.decode("utf-8"))
        self.server.requests.append(req)

        replies = self.server.replies
        content = replies.popleft() if replies else payload(response="Mock")

        self._send_json(
            200,
            {
                "id": f"chatcmpl-mock-{int(time.time())}",
                "object": "chat.completion",
                "created": int(time.time()),
                "model": self.server.model_name,
                "choices": [
                    {
                        "index": 0,
                        "message": {"role": "assistant", "content": content},
                        "finish_reason": "stop",
                    }
                ],
                "usage": {"prompt_tokens": 10, "completion_tokens": 10, "total_tokens": 20},
            },
        )


@pytest.fixture
def oracle_mock_server():
    """Tiny OpenAI-compatible server; ``server.replies`` feeds completions."""
    server = ThreadingHTTPServer(("127.0.0.1", 0), _OpenAIMockHandler)
    server.model_name = "mock-model"  # type: ignore[attr-defined]
    server.replies = deque()  # type: ignore[attr-defined]
    server.requests = []  # type: ignore[attr-defined]

    host, port = server.server_address
    server.url = f"http://{host}:{port}"  # type: ignore[attr-defined]

    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    deadline = time.time() + 5.0
    while time.time() < deadline:
        try:
            with socket.create_connection((host, port), timeout=0.2):
                break
        except OSError:
            time.sleep(0.05)
    else:
        server.shutdown()
        raise RuntimeError("Failed to start oracle mock server")

    yield server

    server.shutdown()
    server.server_close()
