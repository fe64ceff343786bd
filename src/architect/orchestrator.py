"""Conversation loop that drives the model and keeps the roadmap in sync."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from .extractor import ExtractionResult, extract_response
from .memory.roadmap import RoadmapModel
from .memory.schema import Role, Roadmap, SessionSnapshot, Turn
from .memory.snapshot import load_snapshot, save_snapshot
from .memory.store import MessageStore
from .models.llm_client import LLMClient, LLMTransportError
from .prompts import BEHAVIOR_DIRECTIVE
from .request_builder import DEFAULT_GENERATION, GenerationConfig, build_request
from .tools.exchange_logs import write_exchange_log

LOGGER = logging.getLogger(__name__)


class TurnInProgressError(RuntimeError):
    """Raised when a turn is submitted while another one is still in flight."""


class SessionListener(Protocol):
    """Rendering collaborator notified as the conversation advances."""

    def on_clean_text_ready(self, text: str, role: Role) -> None: ...

    def on_roadmap_replaced(self, roadmap: Optional[Roadmap]) -> None: ...

    def on_error(self, message: str) -> None: ...


class NullListener:
    """Listener that ignores every notification."""

    def on_clean_text_ready(self, text: str, role: Role) -> None:
        pass

    def on_roadmap_replaced(self, roadmap: Optional[Roadmap]) -> None:
        pass

    def on_error(self, message: str) -> None:
        pass


class ArchitectSession:
    """Explicit owner of the message log and the active roadmap."""

    def __init__(
        self,
        store: MessageStore | None = None,
        roadmap: RoadmapModel | None = None,
    ) -> None:
        self.store = store or MessageStore()
        self.roadmap = roadmap or RoadmapModel()

    @classmethod
    def from_snapshot(cls, snapshot: SessionSnapshot) -> "ArchitectSession":
        return cls(MessageStore(snapshot.conversation), RoadmapModel(snapshot.roadmap))

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(conversation=list(self.store.turns), roadmap=self.roadmap.current)

    def restore(self, snapshot: SessionSnapshot) -> None:
        """Replace both stores with the contents of ``snapshot``."""
        self.store.replace(snapshot.conversation)
        if snapshot.roadmap is None:
            self.roadmap.clear()
        else:
            self.roadmap.replace(snapshot.roadmap)

    def reset(self) -> None:
        self.store.reset()
        self.roadmap.clear()

    def save(self, path: Path | str) -> Path:
        return save_snapshot(path, self.store.turns, self.roadmap.current)

    def load(self, path: Path | str) -> SessionSnapshot:
        """Load ``path``; raises ``SnapshotCorrupt`` before touching any state."""
        snapshot = load_snapshot(path)
        self.restore(snapshot)
        return snapshot


class Orchestrator:
    """Runs one user turn at a time through request, transport, and extraction."""

    def __init__(
        self,
        client: LLMClient,
        *,
        session: ArchitectSession | None = None,
        listener: SessionListener | None = None,
        directive: str = BEHAVIOR_DIRECTIVE,
        generation: GenerationConfig = DEFAULT_GENERATION,
        logs_root: Path | None = None,
    ) -> None:
        self.client = client
        self.session = session or ArchitectSession()
        self.listener: SessionListener = listener or NullListener()
        self.directive = directive
        self.generation = generation
        self.logs_root = logs_root
        self._in_flight = False
        self._turn_counter = 0

    @property
    def busy(self) -> bool:
        return self._in_flight

    def submit_turn(self, text: str) -> ExtractionResult | None:
        """Send one user turn; returns the extraction, or ``None`` if nothing was exchanged."""
        if self._in_flight:
            raise TurnInProgressError("A reply is still pending; wait for it before sending another message.")
        message = (text or "").strip()
        if not message:
            return None

        self._in_flight = True
        try:
            return self._run_turn(message)
        finally:
            self._in_flight = False

    def _run_turn(self, message: str) -> ExtractionResult | None:
        store = self.session.store
        checkpoint = len(store)
        self._turn_counter += 1
        turn_number = self._turn_counter

        exchange: Dict[str, Any] = {}

        def _record(payload: Dict[str, Any], raw: Optional[str], error: Optional[Exception]) -> None:
            exchange.update(payload=payload, raw_reply=raw, error=error)

        # Any failure after this point rolls the history back to the checkpoint.
        try:
            store.append(Turn(role=Role.USER, content=message))
            self.listener.on_clean_text_ready(message, Role.USER)

            request = build_request(store, directive=self.directive, generation=self.generation)
            try:
                raw_reply = self.client.send(request, logger=_record)
            except LLMTransportError as error:
                store.discard_from(checkpoint)
                LOGGER.error("Model request failed: %s", error)
                self._log_exchange(turn_number, exchange.get("payload"), error=exchange.get("error") or error)
                self.listener.on_error(str(error))
                return None

            result = extract_response(raw_reply)
            store.append(Turn(role=Role.MODEL, content=raw_reply))
        except BaseException:
            store.discard_from(checkpoint)
            raise

        if result.roadmap is not None:
            self.session.roadmap.replace(result.roadmap)
            self.listener.on_roadmap_replaced(result.roadmap)
        self._log_exchange(
            turn_number,
            exchange.get("payload"),
            raw_reply=exchange.get("raw_reply", raw_reply),
            extraction=result,
        )
        self.listener.on_clean_text_ready(result.clean_text, Role.MODEL)
        return result

    def reset(self) -> None:
        """Forget the conversation and the roadmap."""
        self.session.reset()
        self.listener.on_roadmap_replaced(None)

    def load(self, path: Path | str) -> SessionSnapshot:
        """Restore a saved session and re-render its roadmap."""
        if self._in_flight:
            raise TurnInProgressError("Cannot load a session while a reply is pending.")
        snapshot = self.session.load(path)
        self.listener.on_roadmap_replaced(snapshot.roadmap)
        return snapshot

    def save(self, path: Path | str) -> Path:
        return self.session.save(path)

    def _log_exchange(self, turn: int, payload: Optional[Dict[str, Any]], **details: Any) -> None:
        if self.logs_root is None:
            return
        write_exchange_log(self.logs_root, turn, payload, **details)


__all__ = [
    "ArchitectSession",
    "NullListener",
    "Orchestrator",
    "SessionListener",
    "TurnInProgressError",
]
