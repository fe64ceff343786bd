"""Session state: message log, roadmap holder, and snapshot codec."""

from .roadmap import RenderItem, RoadmapModel, iter_render_plan
from .schema import DEFAULT_ROOT_NAME, Role, Roadmap, RoadmapNode, SessionSnapshot, StepStatus, Turn
from .snapshot import SnapshotCorrupt, deserialize, load_snapshot, save_snapshot, serialize
from .store import MessageStore

__all__ = [
    "DEFAULT_ROOT_NAME",
    "MessageStore",
    "RenderItem",
    "Role",
    "Roadmap",
    "RoadmapModel",
    "RoadmapNode",
    "SessionSnapshot",
    "SnapshotCorrupt",
    "StepStatus",
    "Turn",
    "deserialize",
    "iter_render_plan",
    "load_snapshot",
    "save_snapshot",
    "serialize",
]
