"""
Guest and admin session models, plus admin users
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey

from app.core.db import Base

class GuestSession(Base):
    __tablename__ = "guest_sessions"
    
    session_token = Column(String(128), primary_key=True)
    guest_id = Column(String(36), ForeignKey("guests.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    expires_at = Column(DateTime, nullable=False)

    def to_dict(self) -> dict:
        return {
            "session_token": self.session_token,
            "guest_id": self.guest_id,
            "expires_at": self.expires_at.isoformat(),
        }


class AdminSession(Base):
    __tablename__ = "admin_sessions"

    session_token = Column(String(128), primary_key=True)
    username = Column(String(100), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    expires_at = Column(DateTime, nullable=False)

    def to_dict(self) -> dict:
        return {
            "session_token": self.session_token,
            "username": self.username,
            "expires_at": self.expires_at.isoformat(),
        }


class AdminUser(Base):
    __tablename__ = "admin_users"

    username = Column(String(100), primary_key=True)
    password = Column(String(255), nullable=False)  # stored as entered
    created_at = Column(DateTime, default=datetime.utcnow)
