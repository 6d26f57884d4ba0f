"""
Event-related Pydantic schemas
"""

from typing import Optional
from pydantic import BaseModel

class EventData(BaseModel):
    """Event as presented to pages: display strings plus the raw values used for sorting"""
    id: str  # event code
    title: str
    description: str = ""
    date: str = ""
    raw_date: Optional[str] = None
    time_start: str = ""
    raw_time_start: Optional[str] = None
    time_end: str = ""
    location: str = ""
    maps_link: str = ""
    is_parent: bool = True
    parent_event_id: Optional[str] = None  # parent event code
    can_rsvp: bool = False
    rsvp_deadline: Optional[str] = None
    rsvp_open_date: Optional[str] = None
    max_plus_ones: Optional[int] = None
    disabled: bool = False
