from app.ai.config import load_ai_config
from app.ai.types import AIClient
from app.core.config import Settings

from app.ai.providers.disabled_provider import DisabledProvider
from app.ai.providers.openai_provider import OpenAIProvider


def get_ai_client(settings: Settings) -> AIClient:
    cfg = load_ai_config(settings)

    if not cfg.enabled:
        return DisabledProvider(reason="LLM is disabled or OPENAI_API_KEY is missing")

    if cfg.provider == "openai":
        return OpenAIProvider(
            model=cfg.model,
            api_key=cfg.api_key,
            base_url=cfg.base_url,
            timeout_s=cfg.timeout_s,
            max_retries=cfg.max_retries,
        )

    raise ValueError(f"Unsupported AI_PROVIDER='{cfg.provider}'")
