"""Turn the message log into the wire request sent to the model endpoint."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .memory.store import MessageStore
from .prompts import BEHAVIOR_DIRECTIVE


@dataclass(frozen=True, slots=True)
class GenerationConfig:
    """Sampling parameters; fixed for the lifetime of the process."""

    temperature: float = 0.7
    top_p: float = 0.95
    max_output_tokens: int = 8192

    def to_payload(self) -> Dict[str, Any]:
        return {
            "temperature": self.temperature,
            "topP": self.top_p,
            "maxOutputTokens": self.max_output_tokens,
        }


DEFAULT_GENERATION = GenerationConfig()


@dataclass(slots=True)
class ChatRequest:
    """Ordered turns, system directive, and generation parameters for one call."""

    contents: List[Dict[str, Any]]
    system_instruction: str
    generation: GenerationConfig = field(default_factory=GenerationConfig)

    def to_payload(self) -> Dict[str, Any]:
        """Render a transport-ready payload for the ``generateContent`` API."""
        payload: Dict[str, Any] = {"contents": copy.deepcopy(self.contents)}
        if self.system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": self.system_instruction}]}
        payload["generationConfig"] = self.generation.to_payload()
        return payload


def build_request(
    store: MessageStore,
    *,
    directive: str = BEHAVIOR_DIRECTIVE,
    generation: GenerationConfig = DEFAULT_GENERATION,
) -> ChatRequest:
    """Build the request for ``store``, which already holds the new user turn."""
    return ChatRequest(
        contents=store.to_request_format(),
        system_instruction=directive,
        generation=generation,
    )


__all__ = ["ChatRequest", "DEFAULT_GENERATION", "GenerationConfig", "build_request"]
