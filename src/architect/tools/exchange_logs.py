"""Structured per-turn logs of model exchanges, written for later debugging."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

from ..extractor import ExtractionResult

__all__ = ["ExchangeLogEntry", "load_exchange_log", "write_exchange_log"]


@dataclass(slots=True)
class ExchangeLogEntry:
    """In-memory representation of a stored exchange log."""

    path: Path
    turn: int
    payload: Mapping[str, Any]

    @property
    def request(self) -> Mapping[str, Any]:
        value = self.payload.get("request")
        if isinstance(value, Mapping):
            return value
        return {}

    @property
    def raw_reply(self) -> str | None:
        value = self.payload.get("raw_reply")
        return value if isinstance(value, str) else None

    @property
    def error(self) -> str | None:
        value = self.payload.get("error")
        if isinstance(value, str) and value.strip():
            return value
        return None

    @property
    def roadmap_updated(self) -> bool:
        extraction = self.payload.get("extraction")
        if isinstance(extraction, Mapping):
            return extraction.get("roadmap") is not None
        return False


def write_exchange_log(
    logs_root: Path,
    turn: int,
    request_payload: Mapping[str, Any] | None,
    *,
    raw_reply: str | None = None,
    extraction: ExtractionResult | None = None,
    error: Exception | None = None,
) -> Path | None:
    """Persist one exchange; returns ``None`` when the log directory is unusable."""
    try:
        logs_root.mkdir(parents=True, exist_ok=True)
    except OSError:
        return None

    entry: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "turn": turn,
        "request": dict(request_payload or {}),
        "raw_reply": raw_reply,
    }
    if extraction is not None:
        entry["extraction"] = {
            "clean_text": extraction.clean_text,
            "block_found": extraction.block_found,
            "parse_error": extraction.parse_error,
            "roadmap": extraction.roadmap.model_dump(mode="json") if extraction.roadmap else None,
        }
    if error is not None:
        entry["error"] = str(error)

    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
    log_path = logs_root / f"exchange__{turn:04d}__{timestamp}.json"
    try:
        with log_path.open("w", encoding="utf-8") as handle:
            json.dump(entry, handle, indent=2, sort_keys=True, ensure_ascii=False)
    except OSError:
        return None
    return log_path


def load_exchange_log(path: Path | str) -> ExchangeLogEntry:
    """Load a structured exchange log from disk."""
    log_path = Path(path).resolve()
    with log_path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    turn = payload.get("turn")
    return ExchangeLogEntry(path=log_path, turn=turn if isinstance(turn, int) else 0, payload=payload)
