"""Serialization of conversation and roadmap state into portable snapshots."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional

from pydantic import ValidationError

from .schema import Roadmap, SessionSnapshot, Turn

LOGGER = logging.getLogger(__name__)

# Keys written by the earlier browser client; accepted on load only.
_LEGACY_CONVERSATION_KEY = "chatHistory"
_LEGACY_ROADMAP_KEY = "roadmapData"


class SnapshotCorrupt(ValueError):
    """Raised when a snapshot document cannot be turned back into session state."""


def serialize(conversation: Iterable[Turn], roadmap: Roadmap | None) -> bytes:
    """Render the session state as a UTF-8 JSON document."""
    document = {
        "conversation": [turn.model_dump(mode="json") for turn in conversation],
        "roadmap": roadmap.model_dump(mode="json") if roadmap is not None else None,
    }
    return json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")


def deserialize(data: bytes | str) -> SessionSnapshot:
    """Parse a snapshot document, tolerating absent fields."""
    try:
        text = data.decode("utf-8") if isinstance(data, (bytes, bytearray)) else data
        document = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as error:
        raise SnapshotCorrupt(f"Snapshot is not valid JSON: {error}") from error
    except RecursionError as error:
        raise SnapshotCorrupt("Snapshot is nested too deeply to parse.") from error
    if not isinstance(document, Mapping):
        raise SnapshotCorrupt("Snapshot must be a JSON object at the top level.")

    conversation = _load_conversation(_first_present(document, "conversation", _LEGACY_CONVERSATION_KEY))
    roadmap = _load_roadmap(_first_present(document, "roadmap", _LEGACY_ROADMAP_KEY))
    return SessionSnapshot(conversation=conversation, roadmap=roadmap)


def _first_present(document: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in document:
            return document[key]
    return None


def _load_conversation(value: Any) -> List[Turn]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise SnapshotCorrupt("Snapshot conversation must be a list of turns.")
    turns: List[Turn] = []
    for index, item in enumerate(value):
        try:
            turns.append(Turn.model_validate(item))
        except ValidationError as error:
            raise SnapshotCorrupt(f"Snapshot turn {index} is malformed.") from error
    return turns


def _load_roadmap(value: Any) -> Optional[Roadmap]:
    if not isinstance(value, Mapping):
        if value is not None:
            LOGGER.warning("Ignoring snapshot roadmap of type %s", type(value).__name__)
        return None
    try:
        return Roadmap.model_validate(value)
    except (ValidationError, RecursionError) as error:
        LOGGER.warning("Ignoring malformed snapshot roadmap (%s)", type(error).__name__)
        return None


def save_snapshot(path: Path | str, conversation: Iterable[Turn], roadmap: Roadmap | None) -> Path:
    """Write a snapshot to ``path`` atomically and return the resolved path."""
    target = Path(path).resolve()
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = serialize(conversation, roadmap)
    fd, temp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(payload)
        os.replace(temp_name, target)
    except OSError:
        try:
            os.unlink(temp_name)
        except OSError:
            pass
        raise
    LOGGER.info("Saved session snapshot to %s", target)
    return target


def load_snapshot(path: Path | str) -> SessionSnapshot:
    """Read and parse a snapshot file."""
    source = Path(path)
    try:
        data = source.read_bytes()
    except OSError as error:
        raise SnapshotCorrupt(f"Unable to read snapshot {source}: {error.strerror or error}") from error
    snapshot = deserialize(data)
    LOGGER.info("Loaded session snapshot from %s (%d turn(s))", source, len(snapshot.conversation))
    return snapshot


__all__ = [
    "SnapshotCorrupt",
    "deserialize",
    "load_snapshot",
    "save_snapshot",
    "serialize",
]
