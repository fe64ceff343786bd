"""Convenience exports for the architect's LLM client implementations."""

from .gemini import GeminiClient
from .llm_client import (
    ExchangeLogger,
    LLMClient,
    LLMClientError,
    LLMResponseFormatError,
    LLMTransportError,
)
from .offline import OfflineClient

__all__ = [
    "ExchangeLogger",
    "GeminiClient",
    "LLMClient",
    "LLMClientError",
    "LLMResponseFormatError",
    "LLMTransportError",
    "OfflineClient",
]
