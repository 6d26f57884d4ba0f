"""
RSVP Pydantic schemas
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

class RsvpAnswer(str, Enum):
    YES = "Yes"
    NO = "No"
    MAYBE = "Maybe"

class RsvpRequest(BaseModel):
    """RSVP submission for one event"""
    event_code: str
    response: RsvpAnswer
    full_name: Optional[str] = None
    dietary_restrictions: str = ""
    plus_one: bool = False
    adult_count: int = Field(0, ge=0)
    children_count: int = Field(0, ge=0)
