"""
Event lookup and display formatting
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple, Union
from urllib.parse import quote

from sqlalchemy.orm import Session

from app.schemas.event import EventData
from app.services.repositories import EventRepo

logger = logging.getLogger(__name__)

RSVP_NOT_OPEN = "not_open"
RSVP_OPEN = "open"
RSVP_CLOSED = "closed"


def format_date(date_str: Optional[str]) -> str:
    """Format 2026-01-24 as Jan 24, 2026; unparsable input is returned as-is"""
    if not date_str:
        return ""
    try:
        parsed = datetime.strptime(date_str[:10], "%Y-%m-%d")
    except ValueError:
        logger.warning(f"Unparsable event date: {date_str}")
        return date_str
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def format_time(time_str: Optional[str]) -> str:
    """Format 13:30:00 as 1:30 PM; anything from 22:30 on reads "Late" """
    if not time_str:
        return ""
    try:
        parts = time_str.split(":")
        hours, minutes = int(parts[0]), int(parts[1])
    except (ValueError, IndexError):
        return time_str

    if (hours >= 22 and minutes >= 30) or hours >= 23:
        return "Late"

    period = "PM" if hours >= 12 else "AM"
    display_hours = hours % 12 or 12
    if minutes == 0:
        return f"{display_hours} {period}"
    return f"{display_hours}:{minutes:02d} {period}"


def maps_link(event: Dict) -> str:
    if event.get("maps_link"):
        return event["maps_link"]
    location = quote(event.get("location") or "", safe="!*'()")
    return f"https://maps.google.com/maps?q={location}"


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse a stored timestamp into a naive UTC datetime.

    Accepts ISO strings and native datetimes, which Firestore returns for
    timestamp fields.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def rsvp_window_state(event: Dict, now: Optional[datetime] = None) -> str:
    now = now or datetime.utcnow()
    open_date = parse_timestamp(event.get("rsvp_open_date"))
    deadline = parse_timestamp(event.get("rsvp_deadline"))
    if open_date and now < open_date:
        return RSVP_NOT_OPEN
    if deadline and now > deadline:
        return RSVP_CLOSED
    return RSVP_OPEN


class EventService:
    """Service for event lookups shaped for pages and API responses"""

    @staticmethod
    def format_event(
        event: Dict,
        parent_code: Optional[str] = None,
        can_rsvp: bool = False,
        now: Optional[datetime] = None
    ) -> EventData:
        return EventData(
            id=event["code"],
            title=event["name"],
            description=event.get("description") or "",
            date=format_date(event.get("date")),
            raw_date=event.get("date"),
            time_start=format_time(event.get("time_start")),
            raw_time_start=event.get("time_start"),
            time_end=format_time(event.get("time_end")),
            location=event.get("location") or "",
            maps_link=maps_link(event),
            is_parent=event.get("parent_event_id") is None,
            parent_event_id=parent_code,
            can_rsvp=can_rsvp,
            rsvp_deadline=event.get("rsvp_deadline"),
            rsvp_open_date=event.get("rsvp_open_date"),
            max_plus_ones=event.get("max_plus_ones"),
            disabled=can_rsvp and rsvp_window_state(event, now) != RSVP_OPEN,
        )

    @staticmethod
    def code_map(db: Session) -> Dict[str, str]:
        """Map of event id -> event code over every stored event"""
        return {e["id"]: e["code"] for e in EventRepo.list_all(db)}

    @staticmethod
    def list_timeline(db: Session) -> List[EventData]:
        """All active events ordered by date and start time"""
        events = EventRepo.list_active(db)
        codes = EventService.code_map(db)
        logger.info(f"Fetched {len(events)} events for timeline")
        return [
            EventService.format_event(e, parent_code=codes.get(e.get("parent_event_id")))
            for e in events
        ]

    @staticmethod
    def get_event_with_children(db: Session, code: str) -> Optional[Tuple[EventData, List[EventData]]]:
        """Active event by code, plus its active children when it is a parent event"""
        event = EventRepo.get_by_code(db, code)
        if not event:
            return None

        parent_code = None
        if event.get("parent_event_id"):
            parent = EventRepo.get_by_id(db, event["parent_event_id"])
            parent_code = parent["code"] if parent else None

        formatted = EventService.format_event(event, parent_code=parent_code)
        children: List[EventData] = []
        if formatted.is_parent:
            children = [
                EventService.format_event(child, parent_code=event["code"])
                for child in EventRepo.list_children(db, event["id"], active_only=True)
            ]
        return formatted, children
