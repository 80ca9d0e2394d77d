from typing import Sequence

from app.ai.types import ChatMessage, LLMUnavailableError


class DisabledProvider:
    def __init__(self, reason: str):
        self._reason = reason

    async def complete(
        self, messages: Sequence[ChatMessage], *, max_tokens: int = 1000
    ) -> str:
        raise LLMUnavailableError(self._reason, code="llm_disabled")
