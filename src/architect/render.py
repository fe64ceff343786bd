"""Plain-text rendering of roadmaps for terminal output."""

from __future__ import annotations

from typing import Dict, List, Optional

from .memory.roadmap import RenderItem, iter_render_plan
from .memory.schema import Roadmap, StepStatus

STATUS_MARKERS: Dict[StepStatus, str] = {
    StepStatus.DONE: "[x]",
    StepStatus.ACTIVE: "[>]",
    StepStatus.PENDING: "[ ]",
}

EMPTY_ROADMAP_TEXT = "Waiting for a project definition..."
NO_STEPS_TEXT = "No steps defined yet."


def render_item(item: RenderItem, *, indent: str = "  ") -> str:
    marker = STATUS_MARKERS.get(item.node.status, STATUS_MARKERS[StepStatus.PENDING])
    return f"{indent * item.depth}{marker} {item.node.title}"


def render_roadmap_lines(roadmap: Optional[Roadmap], *, indent: str = "  ") -> List[str]:
    """Return the roadmap as indented text lines: title first, then every step."""
    if roadmap is None:
        return [EMPTY_ROADMAP_TEXT]
    lines = [roadmap.root]
    plan = iter_render_plan(roadmap)
    if not plan:
        lines.append(NO_STEPS_TEXT)
        return lines
    lines.extend(render_item(item, indent=indent) for item in plan)
    return lines


def render_roadmap(roadmap: Optional[Roadmap]) -> str:
    return "\n".join(render_roadmap_lines(roadmap))


__all__ = [
    "EMPTY_ROADMAP_TEXT",
    "NO_STEPS_TEXT",
    "STATUS_MARKERS",
    "render_item",
    "render_roadmap",
    "render_roadmap_lines",
]
