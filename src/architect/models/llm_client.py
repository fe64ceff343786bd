"""Client base class shared by all language-model integrations."""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from ..request_builder import ChatRequest

__all__ = [
    "ExchangeLogger",
    "LLMClient",
    "LLMClientError",
    "LLMResponseFormatError",
    "LLMTransportError",
]


ExchangeLogger = Callable[[Dict[str, Any], Optional[str], Optional[Exception]], None]


class LLMClientError(RuntimeError):
    """Base error raised for LLM client failures."""


class LLMTransportError(LLMClientError):
    """Raised when the endpoint cannot be reached or reports an error.

    The message is shown to the user as-is, so it must stay human readable.
    """


class LLMResponseFormatError(LLMTransportError):
    """Raised when the endpoint answers without any reply text."""


class LLMClient:
    """One request in, one reply text out; no retries."""

    def __init__(self, model: str) -> None:
        self._model = model

    @property
    def model(self) -> str:
        """Return the model name configured for this client."""
        return self._model

    def send(self, request: ChatRequest, *, logger: Optional[ExchangeLogger] = None) -> str:
        """Send ``request`` and return the raw reply text."""
        payload = request.to_payload()
        try:
            raw = self._raw_invoke(payload)
        except LLMTransportError as error:
            if logger:
                logger(payload, None, error)
            raise
        if logger:
            logger(payload, raw, None)
        return raw

    def _raw_invoke(self, payload: Dict[str, Any]) -> str:
        """Perform the transport call. Subclasses must implement."""
        raise NotImplementedError("Subclasses must implement _raw_invoke().")
