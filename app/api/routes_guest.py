"""
Guest-facing API routes
"""

import logging
from typing import Dict

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import get_db
from app.schemas.guest import GuestLoginRequest, SessionValidateRequest
from app.schemas.rsvp import RsvpRequest
from app.services.auth_service import AuthService
from app.services.rsvp_service import RsvpService
from app.utils.security import (
    rate_limit_check,
    get_client_ip,
    require_guest,
    set_session_cookie,
    clear_session_cookie,
)
from app.utils.responses import success_response, error_response, rate_limit_error, forbidden_error

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/guest/login")
async def login_guest(
    request: Request,
    login_data: GuestLoginRequest,
    db: Session = Depends(get_db)
):
    """Log a guest in by name and start a session"""
    # Rate limiting
    client_ip = get_client_ip(request)
    if not rate_limit_check(client_ip):
        rate_limit_error()

    if not login_data.full_name.strip():
        return error_response(message="Please enter your full name", status_code=400)

    result = AuthService.login_guest(db, login_data.full_name)
    if not result:
        return error_response(
            message="Your name was not found on the guest list. Please enter it as it appears on your invitation.",
            error_code="GUEST_NOT_FOUND",
            status_code=404
        )

    token, profile = result
    response = success_response(
        message="Welcome!",
        data={"guest": profile, "session_token": token}
    )
    set_session_cookie(response, settings.GUEST_COOKIE_NAME, token, settings.GUEST_SESSION_DAYS * 24 * 3600)
    return response

@router.post("/auth/validate-session")
async def validate_session(
    request: Request,
    body: SessionValidateRequest,
    db: Session = Depends(get_db)
):
    """Validate a session token from the body or, failing that, the cookie"""
    token = body.session_token
    if body.use_cookie or not token:
        token = request.cookies.get(settings.GUEST_COOKIE_NAME) or token

    if not token:
        return error_response(message="No session token provided", status_code=400)

    guest = AuthService.validate_guest_session(db, token)
    if not guest:
        return error_response(message="Invalid or expired session", status_code=401)

    data = {"guest": AuthService.guest_profile(db, guest)}
    if body.use_cookie:
        data["session_token"] = token

    return success_response(message="Session is valid", data=data)

@router.post("/auth/logout")
async def logout_guest(request: Request, db: Session = Depends(get_db)):
    """End the guest session and clear its cookie"""
    AuthService.logout_guest(db, request.cookies.get(settings.GUEST_COOKIE_NAME))

    response = success_response(message="Logged out successfully")
    clear_session_cookie(response, settings.GUEST_COOKIE_NAME)
    return response

@router.post("/rsvp")
async def submit_rsvp(
    rsvp_data: RsvpRequest,
    guest: Dict = Depends(require_guest),
    db: Session = Depends(get_db)
):
    """Record the logged-in guest's RSVP for one event"""
    if rsvp_data.full_name and rsvp_data.full_name.strip().lower() != guest["full_name"].strip().lower():
        forbidden_error("Unauthorized to submit RSVP for this guest")

    result = RsvpService.submit_rsvp(db, guest, rsvp_data)

    message = "Thank you for your RSVP!"
    if result["cascaded"]:
        message += f" Related events updated: {', '.join(result['cascaded'])}."

    return success_response(message=message, data=result)
