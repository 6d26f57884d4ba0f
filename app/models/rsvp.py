"""
RSVP model
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from app.core.db import Base

class Rsvp(Base):
    __tablename__ = "rsvps"
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    guest_id = Column(String(36), ForeignKey("guests.id"), nullable=False, index=True)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False, index=True)
    response = Column(String(10), nullable=False)  # Yes, No, Maybe
    dietary_restrictions = Column(String(500), default="")
    has_plus_ones = Column(Boolean, default=False)
    plus_one_count = Column(Integer, default=0)
    adult_count = Column(Integer, default=0)
    children_count = Column(Integer, default=0)
    responded_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    guest = relationship("Guest", back_populates="rsvps")
    event = relationship("Event", back_populates="rsvps")

    __table_args__ = (UniqueConstraint("guest_id", "event_id", name="uq_rsvp_guest_event"),)

    def to_dict(self) -> dict:
        return {
            "guest_id": self.guest_id,
            "event_id": self.event_id,
            "response": self.response,
            "dietary_restrictions": self.dietary_restrictions or "",
            "has_plus_ones": bool(self.has_plus_ones),
            "plus_one_count": self.plus_one_count or 0,
            "adult_count": self.adult_count or 0,
            "children_count": self.children_count or 0,
            "responded_at": self.responded_at.isoformat() if self.responded_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
