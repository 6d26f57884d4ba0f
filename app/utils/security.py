"""
Security utilities: session cookies, auth dependencies and rate limiting
"""

from fastapi import Depends, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session
from typing import Dict
import time
from collections import defaultdict

from app.core.config import settings
from app.core.db import get_db
from app.services.auth_service import AuthService
from app.utils.responses import forbidden_error, unauthorized_error

# Simple in-memory rate limiter
rate_limiter = defaultdict(list)

def set_session_cookie(response: Response, name: str, token: str, max_age: int) -> None:
    response.set_cookie(
        key=name,
        value=token,
        max_age=max_age,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        path="/",
    )

def clear_session_cookie(response: Response, name: str) -> None:
    response.delete_cookie(key=name, path="/")

def require_guest(request: Request, db: Session = Depends(get_db)) -> Dict:
    """Guest owning the session cookie: 401 without a cookie, 403 for an invalid or expired one"""
    token = request.cookies.get(settings.GUEST_COOKIE_NAME)
    if not token:
        unauthorized_error("Authentication required")
    guest = AuthService.validate_guest_session(db, token)
    if not guest:
        forbidden_error("Invalid or expired session")
    return guest

def require_admin(request: Request, db: Session = Depends(get_db)) -> str:
    """Admin username for the admin session cookie"""
    token = request.cookies.get(settings.ADMIN_COOKIE_NAME)
    username = AuthService.validate_admin_session(db, token)
    if not username:
        unauthorized_error("Unauthorized")
    return username

def rate_limit_check(client_ip: str, limit: int = None) -> bool:
    """Simple rate limiting by IP address"""
    if limit is None:
        limit = settings.RATE_LIMIT_PER_MINUTE

    current_time = time.time()
    minute_ago = current_time - 60

    # Clean old requests
    rate_limiter[client_ip] = [
        req_time for req_time in rate_limiter[client_ip]
        if req_time > minute_ago
    ]

    # Check limit
    if len(rate_limiter[client_ip]) >= limit:
        return False

    # Add current request
    rate_limiter[client_ip].append(current_time)
    return True

def get_client_ip(request) -> str:
    """Extract client IP from request"""
    # Check for forwarded IP first (for reverse proxy setups)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    # Check for real IP header
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    # Fall back to direct client IP
    return request.client.host if request.client else "unknown"
