"""Append-only message log that backs the dialogue replayed to the model."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Iterator, List, Sequence

from .schema import Role, Turn

LOGGER = logging.getLogger(__name__)

_TRANSPORT_ROLES: Dict[Role, str] = {
    Role.USER: "user",
    Role.MODEL: "model",
}


class MessageStore:
    """Ordered conversation history; the source of truth for replayed turns."""

    def __init__(self, turns: Iterable[Turn] | None = None) -> None:
        self._turns: List[Turn] = list(turns or [])

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(tuple(self._turns))

    @property
    def turns(self) -> tuple[Turn, ...]:
        """Return an immutable view of the stored turns."""
        return tuple(self._turns)

    def append(self, turn: Turn) -> None:
        """Add ``turn`` to the end of the log."""
        self._turns.append(turn)

    def extend(self, turns: Iterable[Turn]) -> None:
        for turn in turns:
            self.append(turn)

    def discard_from(self, index: int) -> List[Turn]:
        """Drop every turn at position ``index`` or later and return them."""
        if index < 0 or index > len(self._turns):
            raise IndexError(f"Checkpoint {index} is outside the log of {len(self._turns)} turn(s)")
        dropped = self._turns[index:]
        del self._turns[index:]
        if dropped:
            LOGGER.debug("Discarded %d pending turn(s)", len(dropped))
        return dropped

    def reset(self) -> None:
        """Remove all turns."""
        self._turns.clear()

    def replace(self, turns: Sequence[Turn]) -> None:
        """Swap the whole history for ``turns``; used when a session is loaded."""
        self._turns = list(turns)

    def to_request_format(self) -> List[Dict[str, Any]]:
        """Map turns onto the transport's two-role content vocabulary, in order."""
        return [
            {
                "role": _TRANSPORT_ROLES[turn.role],
                "parts": [{"text": turn.content}],
            }
            for turn in self._turns
        ]


__all__ = ["MessageStore"]
