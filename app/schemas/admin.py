"""
Admin Pydantic schemas
"""

from typing import Optional
from pydantic import BaseModel

class AdminLoginRequest(BaseModel):
    """Admin credentials; missing fields are reported by the route as a 400"""
    username: Optional[str] = None
    password: Optional[str] = None

class AdminTokenRequest(BaseModel):
    """Admin session token validation"""
    admin_token: Optional[str] = None
