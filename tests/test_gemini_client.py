from __future__ import annotations

import json
from typing import Any

import pytest

from architect.memory.schema import Role, Turn
from architect.memory.store import MessageStore
from architect.models.gemini import GeminiClient
from architect.models.llm_client import LLMResponseFormatError, LLMTransportError
from architect.models.offline import OfflineClient
from architect.extractor import extract_response
from architect.request_builder import build_request


def _request():
    return build_request(MessageStore([Turn(role=Role.USER, content="hi")]), directive="sys")


def _reply(*texts: str) -> str:
    return json.dumps(
        {
            "candidates": [
                {
                    "content": {"role": "model", "parts": [{"text": text} for text in texts]},
                    "finishReason": "STOP",
                }
            ]
        }
    )


def test_gemini_client_returns_candidate_text() -> None:
    seen: list[dict[str, Any]] = []

    def transport(payload: dict[str, Any]) -> str:
        seen.append(payload)
        return _reply("first ", "second")

    client = GeminiClient(model="gemini-test", transport=transport)

    assert client.send(_request()) == "first second"
    assert seen[0]["systemInstruction"] == {"parts": [{"text": "sys"}]}
    assert seen[0]["contents"] == [{"role": "user", "parts": [{"text": "hi"}]}]


def test_endpoint_error_payload_raises_transport_error() -> None:
    def transport(_: dict[str, Any]) -> str:
        return json.dumps({"error": {"code": 429, "message": "quota exceeded", "status": "RESOURCE_EXHAUSTED"}})

    client = GeminiClient(transport=transport)

    with pytest.raises(LLMTransportError, match="^quota exceeded$"):
        client.send(_request())


@pytest.mark.parametrize(
    "body",
    [
        "",
        "<html>bad gateway</html>",
        json.dumps({"candidates": []}),
        json.dumps({"candidates": [{"finishReason": "SAFETY"}]}),
        json.dumps({"promptFeedback": {"blockReason": "OTHER"}}),
    ],
)
def test_replies_without_text_are_transport_failures(body: str) -> None:
    client = GeminiClient(transport=lambda _: body)

    with pytest.raises(LLMResponseFormatError):
        client.send(_request())


def test_send_reports_exchange_to_logger() -> None:
    records: list[tuple[Any, Any, Any]] = []
    client = GeminiClient(transport=lambda _: _reply("ok"))

    client.send(_request(), logger=lambda payload, raw, error: records.append((payload, raw, error)))

    assert len(records) == 1
    assert records[0][1] == "ok"
    assert records[0][2] is None


def test_api_key_required_without_transport(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)

    with pytest.raises(ValueError, match="API key"):
        GeminiClient()


def test_endpoint_uses_model_name() -> None:
    client = GeminiClient(api_key="k", model="gemini-x", base_url="https://example.test/v1/")
    assert client.endpoint == "https://example.test/v1/models/gemini-x:generateContent"


def test_offline_client_drafts_roadmap_from_user_turns() -> None:
    store = MessageStore(
        [
            Turn(role=Role.USER, content="Build a shop"),
            Turn(role=Role.MODEL, content="ok"),
            Turn(role=Role.USER, content="Add payments"),
        ]
    )

    reply = OfflineClient().send(build_request(store))
    result = extract_response(reply)

    assert result.clean_text == "(offline) Add payments"
    assert result.roadmap is not None
    assert [(step.title, step.status.value) for step in result.roadmap.steps] == [
        ("Build a shop", "done"),
        ("Add payments", "active"),
    ]
