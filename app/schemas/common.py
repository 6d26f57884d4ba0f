"""
Response envelopes shared by every JSON endpoint
"""

from typing import Any, Literal, Optional
from pydantic import BaseModel

class StandardResponse(BaseModel):
    """Success envelope: {success, message, data}"""
    success: Literal[True] = True
    message: str
    data: Optional[Any] = None

class ErrorResponse(BaseModel):
    """Error envelope; error_code is set for failures the client reacts to"""
    success: Literal[False] = False
    message: str
    error_code: Optional[str] = None
    details: Optional[Any] = None
