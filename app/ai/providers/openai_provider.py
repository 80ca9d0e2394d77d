from __future__ import annotations

import logging
import time
from typing import Optional, Sequence

from openai import AsyncOpenAI

from app.ai.types import ChatMessage, LLMUnavailableError

logger = logging.getLogger(__name__)


class OpenAIProvider:
    def __init__(
        self,
        model: str,
        api_key: str,
        base_url: Optional[str] = None,
        timeout_s: float = 30.0,
        max_retries: int = 0,
        temperature: float = 0.2,
    ):
        self._model = model
        self._temperature = temperature
        key = (api_key or "").strip()
        if not key:
            raise RuntimeError("OPENAI_API_KEY is missing")

        self._client = AsyncOpenAI(
            api_key=key,
            base_url=base_url or None,
            timeout=timeout_s,
            max_retries=max_retries,
        )

    async def complete(
        self, messages: Sequence[ChatMessage], *, max_tokens: int = 1000
    ) -> str:
        payload = [{"role": m.role, "content": m.content} for m in messages]
        started = time.perf_counter()
        response = await self._client.chat.completions.create(
            model=self._model,
            messages=payload,
            temperature=self._temperature,
            response_format={"type": "json_object"},
            max_tokens=max_tokens,
        )
        content = response.choices[0].message.content if response.choices else ""
        logger.info(
            "llm_completion model=%s latency_ms=%s chars=%s",
            self._model,
            int((time.perf_counter() - started) * 1000),
            len(content or ""),
        )
        if not content:
            raise LLMUnavailableError("Empty response from language model", code="empty_response")
        return content

    async def aclose(self) -> None:
        await self._client.close()
