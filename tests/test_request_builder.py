from __future__ import annotations

from architect.memory.schema import Role, Turn
from architect.memory.store import MessageStore
from architect.prompts import BEHAVIOR_DIRECTIVE, ROADMAP_FENCE_TAG, render_behavior_directive
from architect.request_builder import DEFAULT_GENERATION, GenerationConfig, build_request


def test_build_request_payload_snapshot() -> None:
    store = MessageStore(
        [
            Turn(role=Role.USER, content="سلام"),
            Turn(role=Role.MODEL, content="hello"),
            Turn(role=Role.USER, content="plan it"),
        ]
    )

    payload = build_request(store, directive="be brief").to_payload()

    assert payload == {
        "contents": [
            {"role": "user", "parts": [{"text": "سلام"}]},
            {"role": "model", "parts": [{"text": "hello"}]},
            {"role": "user", "parts": [{"text": "plan it"}]},
        ],
        "systemInstruction": {"parts": [{"text": "be brief"}]},
        "generationConfig": {"temperature": 0.7, "topP": 0.95, "maxOutputTokens": 8192},
    }


def test_build_request_defaults_to_behavior_directive() -> None:
    store = MessageStore([Turn(role=Role.USER, content="hi")])
    request = build_request(store)

    assert request.system_instruction == BEHAVIOR_DIRECTIVE
    assert request.generation == DEFAULT_GENERATION


def test_payload_is_detached_from_store() -> None:
    store = MessageStore([Turn(role=Role.USER, content="hi")])
    payload = build_request(store).to_payload()
    payload["contents"][0]["parts"][0]["text"] = "mutated"

    assert store.turns[0].content == "hi"


def test_generation_config_is_fixed_value_object() -> None:
    config = GenerationConfig()
    assert config.to_payload() == {"temperature": 0.7, "topP": 0.95, "maxOutputTokens": 8192}


def test_behavior_directive_mentions_languages_and_roadmap_tag() -> None:
    directive = render_behavior_directive("Persian", "Polish")
    assert "Persian" in directive
    assert "Polish" in directive
    assert f"```{ROADMAP_FENCE_TAG}" in directive
    assert "very last" in directive

    other = render_behavior_directive("German", "English")
    assert "German" in other and "Persian" not in other
