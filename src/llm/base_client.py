# src/llm/base_client.py — v2
"""Abstract LLM client interface.

The orchestrator treats a client as an opaque, possibly slow, possibly
failing, metered function. A single message is a one-shot generation; more
than one message is sent as a multi-turn session whose last message is
the new user turn.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from agrosight.llm.models import LLMResponse, Message


class BaseLLMClient(ABC):
    """Unified interface for all LLM providers."""

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.4,
    ) -> LLMResponse:
        """Text completion."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (google, ...)."""
