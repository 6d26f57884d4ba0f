"""
Domain errors raised by services and rendered by the API error handler
"""

from enum import Enum


class ErrorCode(str, Enum):
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    NOT_INVITED = "NOT_INVITED"
    RSVP_NOT_OPEN = "RSVP_NOT_OPEN"
    RSVP_CLOSED = "RSVP_CLOSED"
    PARTY_TOO_LARGE = "PARTY_TOO_LARGE"


class DomainError(Exception):
    """Base domain error with code, HTTP status and a user-safe message"""

    status_code = 400

    def __init__(self, code: ErrorCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class EventNotFoundError(DomainError):
    status_code = 404

    def __init__(self, event_code: str):
        super().__init__(ErrorCode.EVENT_NOT_FOUND, "Event not found")
        self.event_code = event_code


class NotInvitedError(DomainError):
    status_code = 403

    def __init__(self, event_code: str):
        super().__init__(ErrorCode.NOT_INVITED, "You are not invited to RSVP for this event")
        self.event_code = event_code


class RsvpNotOpenError(DomainError):
    status_code = 403

    def __init__(self, event_name: str):
        super().__init__(ErrorCode.RSVP_NOT_OPEN, f"RSVPs for {event_name} are not open yet")


class RsvpClosedError(DomainError):
    status_code = 403

    def __init__(self, event_name: str):
        super().__init__(
            ErrorCode.RSVP_CLOSED,
            f"The RSVP period for {event_name} has ended. Please contact the hosts directly.",
        )


class PartySizeError(DomainError):
    status_code = 422

    def __init__(self, requested: int, allowed: int):
        super().__init__(
            ErrorCode.PARTY_TOO_LARGE,
            f"You can bring at most {allowed} additional guest(s), {requested} requested",
        )
