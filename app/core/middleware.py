"""
Access-control middleware gating guest and admin pages on their session cookies
"""

import logging
from urllib.parse import quote

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.core import db as database
from app.core.config import settings
from app.services.auth_service import AuthService

logger = logging.getLogger(__name__)


def is_guest_page(path: str) -> bool:
    return path == "/rsvp" or path.startswith("/rsvp/")


def is_admin_page(path: str) -> bool:
    if path == "/admin/login":
        return False
    return path == "/admin" or path.startswith("/admin/")


class AccessControlMiddleware(BaseHTTPMiddleware):
    """Redirects anonymous visitors of protected pages to the matching login page.

    API routes are not handled here; they check sessions through dependencies
    and answer with JSON errors instead of redirects.
    """

    async def dispatch(self, request: Request, call_next):
        raw_path = request.scope.get("raw_path", b"").decode("latin-1") or request.url.path
        if "%20" in raw_path:
            # Collapse leading slashes so the target stays on this host
            clean_path = "/" + raw_path.split("?", 1)[0].replace("%20", "").lstrip("/\\")
            if request.url.query:
                clean_path = f"{clean_path}?{request.url.query}"
            return RedirectResponse(clean_path, status_code=307)

        path = request.url.path
        if is_guest_page(path):
            with database.session_scope() as db:
                guest = AuthService.validate_guest_session(db, request.cookies.get(settings.GUEST_COOKIE_NAME))
            if not guest:
                logger.info(f"Anonymous request to {path}; redirecting to guest login")
                return RedirectResponse(f"/guest-login?next={quote(path)}", status_code=303)
            request.state.guest = guest

        elif is_admin_page(path):
            with database.session_scope() as db:
                username = AuthService.validate_admin_session(db, request.cookies.get(settings.ADMIN_COOKIE_NAME))
            if not username:
                logger.info(f"Unauthenticated request to {path}; redirecting to admin login")
                return RedirectResponse("/admin/login", status_code=303)
            request.state.admin_username = username

        return await call_next(request)
