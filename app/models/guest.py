"""
Guest and event access models
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from app.core.db import Base

class Guest(Base):
    __tablename__ = "guests"
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    full_name = Column(String(255), nullable=False, index=True)
    phone_number = Column(String(50), nullable=True)
    is_active = Column(Boolean, default=True)
    dietary = Column(String(500), default="")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    access = relationship("GuestEventAccess", back_populates="guest", cascade="all, delete-orphan")
    rsvps = relationship("Rsvp", back_populates="guest", cascade="all, delete-orphan")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "full_name": self.full_name,
            "phone_number": self.phone_number or "",
            "is_active": bool(self.is_active),
            "dietary": self.dietary or "",
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class GuestEventAccess(Base):
    __tablename__ = "guest_event_access"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    guest_id = Column(String(36), ForeignKey("guests.id"), nullable=False, index=True)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False, index=True)
    can_rsvp = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    guest = relationship("Guest", back_populates="access")
    event = relationship("Event", back_populates="access")

    __table_args__ = (UniqueConstraint("guest_id", "event_id", name="uq_access_guest_event"),)

    def to_dict(self) -> dict:
        return {
            "guest_id": self.guest_id,
            "event_id": self.event_id,
            "can_rsvp": bool(self.can_rsvp),
        }
