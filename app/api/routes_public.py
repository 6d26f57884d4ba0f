"""
Public API routes - no authentication required
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.services.event_service import EventService
from app.services.qr_service import QRService
from app.utils.responses import success_response, not_found_error, png_inline

router = APIRouter()

@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok"}

@router.get("/api/events")
async def list_events(db: Session = Depends(get_db)):
    """All active events for the timeline"""
    events = EventService.list_timeline(db)

    return success_response(
        message="Events retrieved successfully",
        data={"events": [e.model_dump() for e in events]}
    )

@router.get("/api/event/{event_code}")
async def get_event(event_code: str, db: Session = Depends(get_db)):
    """Single event by code, with its sub-events when it is a main event"""
    result = EventService.get_event_with_children(db, event_code)
    if result is None:
        raise not_found_error("Event")

    event, children = result
    return success_response(
        message="Event retrieved successfully",
        data={
            "event": event.model_dump(),
            "child_events": [c.model_dump() for c in children]
        }
    )

@router.get("/api/event/{event_code}/qr.png")
async def get_event_qr(event_code: str, db: Session = Depends(get_db)):
    """QR code image pointing at the event's RSVP page"""
    if EventService.get_event_with_children(db, event_code) is None:
        raise not_found_error("Event")

    return png_inline(QRService.generate_rsvp_qr(event_code), f"rsvp_{event_code}.png")
