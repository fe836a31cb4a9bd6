# src/llm/adapters/google_adapter.py — v2
"""Google Gemini adapter implementing BaseLLMClient.

Uses the google-generativeai SDK. One message is sent with
``generate_content_async``; several messages open a chat session seeded
with all but the last one, which is then sent with ``send_message_async``.
"""

from __future__ import annotations

import time
from typing import Any

from agrosight.llm.base_client import BaseLLMClient
from agrosight.llm.errors import EmptyResponseError
from agrosight.llm.models import LLMResponse, Message


class GoogleAdapter(BaseLLMClient):
    """Google Gemini adapter."""

    def __init__(self, model: str = "gemini-1.5-flash", api_key: str = "", **kwargs: Any):
        self._model = model
        self._api_key = api_key

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.4,
    ) -> LLMResponse:
        import google.generativeai as genai

        if not messages:
            raise ValueError("At least one message is required")

        genai.configure(api_key=self._api_key)
        model = genai.GenerativeModel(self._model, system_instruction=system)
        gen_config: dict[str, Any] = {
            "max_output_tokens": max_tokens,
            "temperature": temperature,
        }

        t0 = time.monotonic()
        if len(messages) == 1:
            resp = await model.generate_content_async(
                messages[0].content, generation_config=gen_config,
            )
        else:
            chat = model.start_chat(history=_to_contents(messages[:-1]))
            resp = await chat.send_message_async(
                messages[-1].content, generation_config=gen_config,
            )
        latency = int((time.monotonic() - t0) * 1000)

        try:
            text = resp.text or ""
        except ValueError as e:
            # Raised by the SDK when the candidate was blocked or has no parts.
            raise EmptyResponseError(f"Gemini returned no text: {e}") from e

        usage = getattr(resp, "usage_metadata", None)
        return LLMResponse(
            content=text,
            input_tokens=getattr(usage, "prompt_token_count", 0) if usage else 0,
            output_tokens=getattr(usage, "candidates_token_count", 0) if usage else 0,
            model=self._model,
            provider="google",
            latency_ms=latency,
            raw_response=resp,
        )

    @property
    def provider_name(self) -> str:
        return "google"


def _to_contents(messages: list[Message]) -> list[dict[str, Any]]:
    """Convert messages to Gemini chat history format."""
    contents = []
    for m in messages:
        role = "model" if m.role == "assistant" else "user"
        contents.append({"role": role, "parts": [{"text": m.content}]})
    return contents
