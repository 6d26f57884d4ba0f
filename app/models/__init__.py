"""
Database models package
"""

from .event import Event
from .guest import Guest, GuestEventAccess
from .rsvp import Rsvp
from .session import GuestSession, AdminSession, AdminUser

__all__ = ["Event", "Guest", "GuestEventAccess", "Rsvp", "GuestSession", "AdminSession", "AdminUser"]
