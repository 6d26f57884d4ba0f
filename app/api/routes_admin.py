"""
Admin API routes - requires an admin session
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import get_db
from app.schemas.admin import AdminLoginRequest, AdminTokenRequest
from app.services.auth_service import AuthService
from app.services.summary_service import SummaryService
from app.utils.security import require_admin, set_session_cookie, clear_session_cookie
from app.utils.responses import success_response, error_response, not_found_error, csv_download

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/login")
async def admin_login(login_data: AdminLoginRequest, db: Session = Depends(get_db)):
    """Check admin credentials and start an admin session"""
    if not login_data.username or not login_data.password:
        return error_response(message="Username and password are required", status_code=400)

    token = AuthService.login_admin(db, login_data.username, login_data.password)
    if not token:
        logger.info(f"[Admin Login] Invalid credentials for username: {login_data.username}")
        return error_response(message="Invalid credentials", status_code=401)

    response = success_response(message="Login successful")
    set_session_cookie(response, settings.ADMIN_COOKIE_NAME, token, settings.ADMIN_SESSION_HOURS * 3600)
    return response

@router.post("/logout")
async def admin_logout(request: Request, db: Session = Depends(get_db)):
    """End the admin session and clear its cookie"""
    AuthService.logout_admin(db, request.cookies.get(settings.ADMIN_COOKIE_NAME))

    response = success_response(message="Logged out successfully")
    clear_session_cookie(response, settings.ADMIN_COOKIE_NAME)
    return response

@router.get("/auth")
async def admin_auth(username: str = Depends(require_admin)):
    """Report whether the admin cookie is a valid session"""
    return success_response(
        message="Authenticated",
        data={"authenticated": True, "username": username}
    )

@router.post("/auth/validate")
async def validate_admin_token(body: AdminTokenRequest, db: Session = Depends(get_db)):
    """Validate an admin session token passed in the body"""
    if not body.admin_token:
        return error_response(message="No token provided", status_code=400)

    username = AuthService.validate_admin_session(db, body.admin_token)
    if not username:
        return error_response(
            message="Invalid admin credentials",
            details={"is_admin": False},
            status_code=401
        )

    return success_response(
        message="Admin session is valid",
        data={"is_admin": True, "username": username}
    )

@router.get("/summary")
async def rsvp_summary(
    db: Session = Depends(get_db),
    username: str = Depends(require_admin)
):
    """RSVP counts per event and overall attendance"""
    return success_response(
        message="RSVP summary retrieved",
        data={"summary": SummaryService.rsvp_summary(db)}
    )

@router.get("/guests")
async def list_guests(
    db: Session = Depends(get_db),
    username: str = Depends(require_admin)
):
    """All active guests with their responses"""
    guests = SummaryService.guests_with_responses(db)

    return success_response(
        message="Guests retrieved successfully",
        data={"guests": guests}
    )

@router.get("/download")
async def download_event_csv(
    event: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    username: str = Depends(require_admin)
):
    """Download one event's RSVPs as CSV"""
    if not event:
        return error_response(message="Event parameter is required", status_code=400)

    csv_content = SummaryService.export_event_csv(db, event)
    if csv_content is None:
        raise not_found_error("Event")

    filename = f"{event}-rsvps-{datetime.utcnow().date().isoformat()}.csv"
    return csv_download(csv_content, filename)

@router.get("/invited-count")
async def invited_count(
    event_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    username: str = Depends(require_admin)
):
    """Number of guests allowed to RSVP to an event (event_id is the event code)"""
    if not event_id:
        return error_response(message="Event ID parameter is required", status_code=400)

    count = SummaryService.invited_count(db, event_id)
    if count is None:
        raise not_found_error("Event")

    return success_response(message="Invited count retrieved", data={"count": count})
