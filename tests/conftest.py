from __future__ import annotations

import sys
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Deque, Dict, List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from architect.memory.schema import Role, Roadmap  # noqa: E402
from architect.models.llm_client import LLMClient, LLMTransportError  # noqa: E402


class ScriptedClient(LLMClient):
    """Client that replays queued replies or errors and records every payload."""

    def __init__(self, *replies: Any) -> None:
        super().__init__("scripted")
        self.replies: Deque[Any] = deque(replies)
        self.payloads: List[Dict[str, Any]] = []

    def _raw_invoke(self, payload: Dict[str, Any]) -> str:
        self.payloads.append(payload)
        reply = self.replies.popleft()
        if isinstance(reply, Exception):
            raise reply
        return reply


@dataclass
class RecordingListener:
    """Listener fixture that captures every notification in order."""

    texts: List[tuple[str, Role]] = field(default_factory=list)
    roadmaps: List[Optional[Roadmap]] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def on_clean_text_ready(self, text: str, role: Role) -> None:
        self.texts.append((text, role))

    def on_roadmap_replaced(self, roadmap: Optional[Roadmap]) -> None:
        self.roadmaps.append(roadmap)

    def on_error(self, message: str) -> None:
        self.errors.append(message)


@pytest.fixture()
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture()
def transport_error() -> LLMTransportError:
    return LLMTransportError("quota exceeded")


@pytest.fixture()
def make_client():
    """Return a factory building a scripted client from queued replies."""

    def _factory(*replies: Any) -> ScriptedClient:
        return ScriptedClient(*replies)

    return _factory
