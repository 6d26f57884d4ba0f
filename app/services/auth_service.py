"""
Guest and admin session management
"""

import hmac
import logging
import secrets
from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.config import settings
from app.services.event_service import EventService, parse_timestamp
from app.services.repositories import AccessRepo, AdminRepo, EventRepo, GuestRepo, RsvpRepo, SessionRepo

logger = logging.getLogger(__name__)


def new_session_token() -> str:
    return secrets.token_urlsafe(32)


def _is_expired(session: Dict, now: Optional[datetime] = None) -> bool:
    expires_at = parse_timestamp(session.get("expires_at"))
    return expires_at is None or expires_at <= (now or datetime.utcnow())


class AuthService:
    """Service for guest and admin authentication"""

    # -------- Guests --------

    @staticmethod
    def login_guest(db: Session, full_name: str) -> Optional[Tuple[str, Dict]]:
        """Look up an active guest by name and open a session for them"""
        guest = GuestRepo.find_by_name(db, full_name)
        if not guest or not guest.get("is_active"):
            logger.info(f"Guest login rejected for name: {full_name.strip()}")
            return None

        token = new_session_token()
        expires_at = datetime.utcnow() + timedelta(days=settings.GUEST_SESSION_DAYS)
        SessionRepo.create_guest_session(db, token, guest["id"], expires_at)
        logger.info(f"Guest session created for guest ID: {guest['id']}")

        return token, AuthService.guest_profile(db, guest)

    @staticmethod
    def guest_profile(db: Session, guest: Dict) -> Dict:
        """Guest identity plus the events they may RSVP to and their answers so far"""
        codes = EventService.code_map(db)

        events = []
        for access in AccessRepo.list_for_guest(db, guest["id"]):
            event = EventRepo.get_by_id(db, access["event_id"])
            if event and event.get("is_active", True):
                events.append(event)
        events.sort(key=lambda e: (e.get("date") or "", e.get("time_start") or ""))

        responses = {}
        for rsvp in RsvpRepo.list_for_guest(db, guest["id"]):
            code = codes.get(rsvp["event_id"])
            if code:
                responses[code] = rsvp

        return {
            "id": guest["id"],
            "full_name": guest["full_name"],
            "dietary": guest.get("dietary") or "",
            "events": [
                EventService.format_event(e, parent_code=codes.get(e.get("parent_event_id")), can_rsvp=True).model_dump()
                for e in events
            ],
            "responses": responses,
        }

    @staticmethod
    def validate_guest_session(db: Session, token: Optional[str]) -> Optional[Dict]:
        """Return the active guest owning an unexpired session token"""
        if not token:
            return None
        session = SessionRepo.get_guest_session(db, token)
        if not session:
            return None
        if _is_expired(session):
            SessionRepo.delete_guest_session(db, token)
            logger.info("Expired guest session removed")
            return None

        guest = GuestRepo.get_by_id(db, session["guest_id"])
        if not guest or not guest.get("is_active"):
            return None
        return guest

    @staticmethod
    def logout_guest(db: Session, token: Optional[str]) -> None:
        if token:
            SessionRepo.delete_guest_session(db, token)

    # -------- Admins --------

    @staticmethod
    def verify_admin_credentials(db: Session, username: str, password: str) -> Optional[str]:
        """Return the stored username when the credentials match"""
        logger.info(f"[Admin Auth] Verifying credentials for username: {username}")
        user = AdminRepo.get_by_username(db, username)
        if not user:
            return None
        if not hmac.compare_digest(user["password"].encode("utf-8"), password.encode("utf-8")):
            return None
        return user["username"]

    @staticmethod
    def login_admin(db: Session, username: str, password: str) -> Optional[str]:
        stored_username = AuthService.verify_admin_credentials(db, username, password)
        if not stored_username:
            return None

        token = new_session_token()
        expires_at = datetime.utcnow() + timedelta(hours=settings.ADMIN_SESSION_HOURS)
        SessionRepo.create_admin_session(db, token, stored_username, expires_at)
        logger.info(f"[Admin Auth] Session created for: {stored_username}")
        return token

    @staticmethod
    def validate_admin_session(db: Session, token: Optional[str]) -> Optional[str]:
        """Return the admin username for an unexpired admin session token"""
        if not token:
            return None
        session = SessionRepo.get_admin_session(db, token)
        if not session:
            return None
        if _is_expired(session):
            SessionRepo.delete_admin_session(db, token)
            return None
        if not AdminRepo.get_by_username(db, session["username"]):
            return None
        return session["username"]

    @staticmethod
    def logout_admin(db: Session, token: Optional[str]) -> None:
        if token:
            SessionRepo.delete_admin_session(db, token)
