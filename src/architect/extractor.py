"""Split raw model replies into display text and an optional embedded roadmap.

The reply is untrusted text. A roadmap travels inside it as a fenced block
whose opening fence carries the reserved ``json:roadmap`` tag::

    ```json:roadmap
    {"root": "...", "steps": [...]}
    ```

Only the first tagged block is considered. When it parses, the whole fence is
cut out of the display text; when it does not, the reply is shown unchanged
and the caller keeps whatever roadmap it already had.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Optional, Pattern

from pydantic import ValidationError

from .memory.schema import Roadmap
from .prompts import ROADMAP_FENCE_TAG

LOGGER = logging.getLogger(__name__)

ROADMAP_BLOCK_PATTERN: Pattern[str] = re.compile(
    r"```" + re.escape(ROADMAP_FENCE_TAG) + r"\s*(.*?)\s*```",
    re.DOTALL,
)


class RoadmapParseError(ValueError):
    """Raised by :func:`parse_roadmap_payload` when a block cannot become a roadmap."""


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    """Outcome of splitting one reply."""

    clean_text: str
    roadmap: Optional[Roadmap] = None
    block_found: bool = False
    parse_error: Optional[str] = None


def parse_roadmap_payload(payload: str) -> Roadmap:
    """Structurally parse a roadmap block body; unknown keys are ignored."""
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as error:
        raise RoadmapParseError(f"invalid JSON at line {error.lineno} column {error.colno}: {error.msg}") from error
    except RecursionError as error:
        raise RoadmapParseError("payload is nested too deeply") from error
    if not isinstance(data, dict):
        raise RoadmapParseError(f"expected a JSON object, got {type(data).__name__}")
    try:
        return Roadmap.model_validate(data)
    except ValidationError as error:
        first = error.errors()[0] if error.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ())) or "roadmap"
        raise RoadmapParseError(f"{location}: {first.get('msg', 'invalid value')}") from error
    except RecursionError as error:
        raise RoadmapParseError("roadmap is nested too deeply") from error


def extract_response(raw_reply: str) -> ExtractionResult:
    """Split ``raw_reply`` into display text plus the roadmap it carries, if any."""
    match = ROADMAP_BLOCK_PATTERN.search(raw_reply)
    if match is None:
        return ExtractionResult(clean_text=raw_reply)

    try:
        roadmap = parse_roadmap_payload(match.group(1))
    except RoadmapParseError as error:
        LOGGER.warning("Roadmap block could not be parsed; showing reply as plain text (%s)", error)
        return ExtractionResult(clean_text=raw_reply, block_found=True, parse_error=str(error))

    clean_text = (raw_reply[: match.start()] + raw_reply[match.end() :]).strip()
    return ExtractionResult(clean_text=clean_text, roadmap=roadmap, block_found=True)


__all__ = [
    "ExtractionResult",
    "ROADMAP_BLOCK_PATTERN",
    "RoadmapParseError",
    "extract_response",
    "parse_roadmap_payload",
]
