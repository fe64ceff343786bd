"""Holder for the active roadmap and its depth-first render traversal."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .schema import Roadmap, RoadmapNode

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RenderItem:
    """Single entry of a render plan: a node and its nesting depth."""

    depth: int
    node: RoadmapNode


def iter_render_plan(roadmap: Roadmap | None) -> List[RenderItem]:
    """Flatten ``roadmap`` depth-first, pre-order, keeping source order."""
    if roadmap is None:
        return []
    plan: List[RenderItem] = []

    def _visit(nodes: Sequence[RoadmapNode], depth: int) -> None:
        for node in nodes:
            plan.append(RenderItem(depth=depth, node=node))
            _visit(node.substeps, depth + 1)

    _visit(roadmap.steps, 0)
    return plan


class RoadmapModel:
    """The current plan; replaced wholesale, never merged."""

    def __init__(self, roadmap: Roadmap | None = None) -> None:
        self._roadmap = roadmap

    @property
    def current(self) -> Optional[Roadmap]:
        return self._roadmap

    def replace(self, roadmap: Roadmap) -> None:
        """Install ``roadmap`` as the whole plan."""
        self._roadmap = roadmap
        LOGGER.info("Roadmap replaced: %s (%d top-level step(s))", roadmap.root, len(roadmap.steps))

    def clear(self) -> None:
        self._roadmap = None

    def render_plan(self) -> List[RenderItem]:
        return iter_render_plan(self._roadmap)


__all__ = ["RenderItem", "RoadmapModel", "iter_render_plan"]
