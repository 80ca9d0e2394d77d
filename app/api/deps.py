from __future__ import annotations

from fastapi import Request

from app.core.config import settings
from app.core.security import SessionUser
from app.core.services import AppServices


def get_services(request: Request) -> AppServices:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise RuntimeError("Application services are not initialised.")
    return services


def get_current_user(request: Request) -> SessionUser:
    """Session cookie -> user; raises AuthError (401) when absent or invalid."""
    services = get_services(request)
    token = request.cookies.get(settings.session_cookie_name)
    return services.identity.verify(token)
