"""
Event model
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, Boolean, Date, Time, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from app.core.db import Base

class Event(Base):
    __tablename__ = "events"
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    code = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    parent_event_id = Column(String(36), ForeignKey("events.id"), nullable=True, index=True)
    category = Column(String(100), nullable=True)
    date = Column(Date, nullable=True)
    time_start = Column(Time, nullable=True)
    time_end = Column(Time, nullable=True)
    location = Column(String(255), default="")
    maps_link = Column(String(500), nullable=True)
    description = Column(Text, default="")
    rsvp_open_date = Column(DateTime, nullable=True)
    rsvp_deadline = Column(DateTime, nullable=True)
    max_plus_ones = Column(Integer, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    parent = relationship("Event", remote_side=[id], back_populates="children")
    children = relationship("Event", back_populates="parent")
    access = relationship("GuestEventAccess", back_populates="event", cascade="all, delete-orphan")
    rsvps = relationship("Rsvp", back_populates="event", cascade="all, delete-orphan")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "parent_event_id": self.parent_event_id,
            "category": self.category,
            "date": self.date.isoformat() if self.date else None,
            "time_start": self.time_start.isoformat() if self.time_start else None,
            "time_end": self.time_end.isoformat() if self.time_end else None,
            "location": self.location or "",
            "maps_link": self.maps_link,
            "description": self.description or "",
            "rsvp_open_date": self.rsvp_open_date.isoformat() if self.rsvp_open_date else None,
            "rsvp_deadline": self.rsvp_deadline.isoformat() if self.rsvp_deadline else None,
            "max_plus_ones": self.max_plus_ones,
            "is_active": bool(self.is_active),
        }
