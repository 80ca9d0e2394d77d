from contextlib import asynccontextmanager
import logging

from app.core.config import settings
from app.core.services import build_services

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    owned = getattr(app.state, "services", None) is None
    if owned:
        app.state.services = build_services(settings)

    yield

    if owned:
        try:
            await app.state.services.aclose()
        except Exception as exc:  # pragma: no cover - shutdown should not mask the exit
            logger.warning("services_close_failed: %s", exc)
        app.state.services = None
