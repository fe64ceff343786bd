"""Production Gemini client that speaks the ``generateContent`` API."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Callable, Dict, Optional

from .llm_client import LLMClient, LLMResponseFormatError, LLMTransportError

__all__ = ["DEFAULT_BASE_URL", "DEFAULT_MODEL", "GeminiClient"]

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.5-flash"

Transport = Callable[[Dict[str, Any]], str]


class GeminiClient(LLMClient):
    """Thin adapter around the Gemini ``generateContent`` endpoint."""

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        transport: Optional[Transport] = None,
        timeout: Optional[float] = None,
    ) -> None:
        super().__init__(model=model)
        self._api_key = api_key or os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport or self._http_transport

        if transport is None and not self._api_key:
            raise ValueError("An API key is required when using the default transport.")

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}/models/{self._model}:generateContent"

    def _raw_invoke(self, payload: Dict[str, Any]) -> str:
        """Send the request over the configured transport and return the reply text."""
        try:
            raw_response = self._transport(payload)
        except LLMTransportError:
            raise
        except Exception as error:  # pragma: no cover - defensive path
            raise LLMTransportError(f"Transport rejected the request: {error}") from error

        return self._extract_reply_text(raw_response)

    def _http_transport(self, payload: Dict[str, Any]) -> str:
        """Default HTTP transport that targets the Gemini REST API."""
        import urllib.error
        import urllib.request

        if os.getenv("ARCHITECT_DEBUG_PAYLOAD"):
            LOGGER.debug("Gemini request payload:\n%s", json.dumps(payload, indent=2, ensure_ascii=False))

        data = json.dumps(payload).encode("utf-8")
        request = urllib.request.Request(
            self.endpoint,
            data=data,
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": str(self._api_key),
            },
            method="POST",
        )

        try:
            with urllib.request.urlopen(request, timeout=self._timeout) as response:
                raw = response.read()
                status = getattr(response, "status", 200)
        except TimeoutError as error:  # pragma: no cover - network-dependent
            raise LLMTransportError("Gemini response timed out.") from error
        except urllib.error.HTTPError as error:  # pragma: no cover - network-dependent
            body = error.read().decode("utf-8", errors="ignore")
            message = _error_message(body) or body.strip() or error.reason
            raise LLMTransportError(f"HTTP {error.code}: {message}") from error
        except urllib.error.URLError as error:  # pragma: no cover - network-dependent
            raise LLMTransportError(f"Failed to reach Gemini endpoint: {error.reason}") from error

        if status >= 400:
            raise LLMTransportError(f"Unexpected HTTP status {status}")

        return raw.decode("utf-8")

    @staticmethod
    def _extract_reply_text(raw_response: str) -> str:
        """Pull the reply text out of a ``generateContent`` response body."""
        if not raw_response:
            raise LLMResponseFormatError("Gemini returned an empty response.")
        try:
            data = json.loads(raw_response)
        except json.JSONDecodeError as error:
            raise LLMResponseFormatError("Gemini returned a response that is not JSON.") from error
        if not isinstance(data, dict):
            raise LLMResponseFormatError("Gemini returned an unexpected response shape.")

        message = _error_message(data)
        if message:
            raise LLMTransportError(message)

        candidates = data.get("candidates")
        if isinstance(candidates, list) and candidates:
            first = candidates[0] if isinstance(candidates[0], dict) else {}
            content = first.get("content") if isinstance(first.get("content"), dict) else {}
            parts = content.get("parts") if isinstance(content.get("parts"), list) else []
            texts = [
                part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)
            ]
            if texts:
                return "".join(texts)
            finish_reason = first.get("finishReason")
            if finish_reason:
                raise LLMResponseFormatError(f"Gemini returned no text (finish reason: {finish_reason}).")

        feedback = data.get("promptFeedback")
        if isinstance(feedback, dict) and feedback.get("blockReason"):
            raise LLMResponseFormatError(f"Gemini blocked the prompt ({feedback['blockReason']}).")
        raise LLMResponseFormatError("Gemini response did not contain any reply text.")


def _error_message(payload: Any) -> Optional[str]:
    """Return the endpoint-reported error message, if the payload carries one."""
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError:
            return None
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
        status = error.get("status")
        if isinstance(status, str) and status.strip():
            return status.strip()
    if isinstance(error, str) and error.strip():
        return error.strip()
    return None
