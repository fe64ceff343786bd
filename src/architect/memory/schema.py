"""Typed records for conversation turns, roadmaps, and session snapshots."""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_ROOT_NAME = "پروژه"


class RecordModel(BaseModel):
    """Base Pydantic model with strict field handling."""

    model_config = ConfigDict(extra="forbid", frozen=False)


class PayloadModel(BaseModel):
    """Base model for payloads written by the remote model; unknown keys are dropped."""

    model_config = ConfigDict(extra="ignore", frozen=False)


class Role(str, Enum):
    """Author of a conversation turn."""

    USER = "user"
    MODEL = "model"


class StepStatus(str, Enum):
    """Progress marker attached to every roadmap step."""

    DONE = "done"
    ACTIVE = "active"
    PENDING = "pending"

    @classmethod
    def coerce(cls, value: Any) -> "StepStatus":
        """Map loosely formatted status values onto a member, defaulting to PENDING."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return cls.PENDING


class Turn(PayloadModel):
    """Single immutable message in the conversation; unknown keys read from disk are dropped."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    role: Role
    content: str


class RoadmapNode(PayloadModel):
    """One step of the hierarchical plan, possibly carrying nested substeps."""

    id: int = 0
    title: str = ""
    status: StepStatus = StepStatus.PENDING
    substeps: List[RoadmapNode] = Field(default_factory=list)

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> StepStatus:
        return StepStatus.coerce(value)

    @field_validator("id", mode="before")
    @classmethod
    def _default_id(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("title", mode="before")
    @classmethod
    def _default_title(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("substeps", mode="before")
    @classmethod
    def _default_substeps(cls, value: Any) -> Any:
        return [] if value is None else value


class Roadmap(PayloadModel):
    """Project plan extracted from a model reply."""

    root: str = DEFAULT_ROOT_NAME
    steps: List[RoadmapNode] = Field(default_factory=list)

    @field_validator("root", mode="before")
    @classmethod
    def _default_root(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_ROOT_NAME
        return value

    @field_validator("steps", mode="before")
    @classmethod
    def _default_steps(cls, value: Any) -> Any:
        return [] if value is None else value


class SessionSnapshot(RecordModel):
    """Unit of persistence: the full conversation plus the current roadmap."""

    conversation: List[Turn] = Field(default_factory=list)
    roadmap: Optional[Roadmap] = None


__all__ = [
    "DEFAULT_ROOT_NAME",
    "Role",
    "Roadmap",
    "RoadmapNode",
    "SessionSnapshot",
    "StepStatus",
    "Turn",
]
