from __future__ import annotations

from app.core.config import settings


def cors_allowed_origins() -> list[str]:
    origins = [origin.rstrip("/") for origin in settings.cors_allowed_origins]
    if settings.cors_allow_credentials and "*" in origins:
        # browsers reject a wildcard origin on credentialed requests
        return [origin for origin in origins if origin != "*"]
    return origins
