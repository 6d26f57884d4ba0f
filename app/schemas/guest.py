"""
Guest-related Pydantic schemas
"""

from typing import Optional
from pydantic import BaseModel

class GuestLoginRequest(BaseModel):
    """Guest login by full name as printed on the invitation"""
    full_name: str

class SessionValidateRequest(BaseModel):
    """Session validation request; the cookie is used when no token is given"""
    session_token: Optional[str] = None
    use_cookie: bool = False
