"""
Pydantic schemas package
"""

from .common import *
from .event import *
from .guest import *
from .rsvp import *
from .admin import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "EventData",
    "GuestLoginRequest",
    "SessionValidateRequest",
    "RsvpAnswer",
    "RsvpRequest",
    "AdminLoginRequest",
    "AdminTokenRequest"
]
