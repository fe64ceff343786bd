"""Local stub client that synthesizes deterministic replies for demos and tests."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from ..prompts import ROADMAP_FENCE_TAG
from .llm_client import LLMClient

__all__ = ["OfflineClient"]


class OfflineClient(LLMClient):
    """Echo the latest user turn and draft a roadmap from every user turn so far."""

    def __init__(self) -> None:
        super().__init__("offline")

    def _raw_invoke(self, payload: Dict[str, Any]) -> str:
        user_texts = _user_texts(payload.get("contents") or [])
        latest = user_texts[-1] if user_texts else ""
        steps = [
            {
                "id": index,
                "title": text.splitlines()[0][:80],
                "status": "active" if index == len(user_texts) else "done",
                "substeps": [],
            }
            for index, text in enumerate(user_texts, start=1)
        ]
        roadmap = {"root": "Offline draft", "steps": steps}
        block = json.dumps(roadmap, ensure_ascii=False, indent=2)
        return f"(offline) {latest}\n\n```{ROADMAP_FENCE_TAG}\n{block}\n```"


def _user_texts(contents: List[Any]) -> List[str]:
    texts: List[str] = []
    for item in contents:
        if not isinstance(item, dict) or item.get("role") != "user":
            continue
        parts = item.get("parts") or []
        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
        if text.strip():
            texts.append(text.strip())
    return texts
