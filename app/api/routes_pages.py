"""
HTML pages: landing, guest login, RSVP forms and the admin dashboard
"""

from pathlib import Path
from urllib.parse import urlsplit

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import get_db
from app.services.auth_service import AuthService
from app.services.event_service import EventService

BASE_DIR = Path(__file__).resolve().parents[2]

templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

router = APIRouter()

def safe_next_path(target: str) -> str:
    """Local path to return to after login; anything pointing off-site becomes /"""
    if not target.startswith("/") or target.startswith(("//", "/\\")):
        return "/"
    parts = urlsplit(target)
    if parts.scheme or parts.netloc:
        return "/"
    return target

def render_not_found(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "not_found.html", {"title": "Page not found"}, status_code=404)

@router.get("/", response_class=HTMLResponse)
async def landing(request: Request, db: Session = Depends(get_db)):
    """Landing page with the event timeline and the wedding countdown"""
    guest = AuthService.validate_guest_session(db, request.cookies.get(settings.GUEST_COOKIE_NAME))
    return templates.TemplateResponse(request, "landing.html", {
        "title": "Our Wedding",
        "events": EventService.list_timeline(db),
        "wedding_date": settings.WEDDING_DATE,
        "guest": guest,
    })

@router.get("/guest-login", response_class=HTMLResponse)
async def guest_login(request: Request, next: str = "/"):
    """Guest login form"""
    return templates.TemplateResponse(request, "guest_login.html", {
        "title": "Find your invitation",
        "next": safe_next_path(next),
    })

@router.get("/rsvp", response_class=HTMLResponse)
async def rsvp_overview(request: Request, db: Session = Depends(get_db)):
    """Events the logged-in guest may RSVP to"""
    profile = AuthService.guest_profile(db, request.state.guest)
    return templates.TemplateResponse(request, "rsvp_list.html", {
        "title": "Your RSVPs",
        "guest": profile,
    })

@router.get("/rsvp/{event_code}", response_class=HTMLResponse)
async def rsvp_form(event_code: str, request: Request, db: Session = Depends(get_db)):
    """RSVP form for one event, pre-filled from an earlier answer"""
    profile = AuthService.guest_profile(db, request.state.guest)
    event = next((e for e in profile["events"] if e["id"] == event_code), None)
    if event is None:
        return render_not_found(request)

    return templates.TemplateResponse(request, "rsvp_form.html", {
        "title": f"RSVP - {event['title']}",
        "guest": profile,
        "event": event,
        "existing": profile["responses"].get(event_code),
    })

@router.get("/admin/login", response_class=HTMLResponse)
async def admin_login(request: Request):
    """Admin login form"""
    return templates.TemplateResponse(request, "admin_login.html", {"title": "Admin login"})

@router.get("/admin", response_class=HTMLResponse)
async def admin_dashboard(request: Request):
    """Admin dashboard; data is loaded from the admin API"""
    return templates.TemplateResponse(request, "admin_dashboard.html", {
        "title": "RSVP dashboard",
        "username": request.state.admin_username,
    })
