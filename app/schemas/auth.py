from pydantic import BaseModel, Field
from typing import Any, Dict


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class SessionResponse(BaseModel):
    """
    Returned on login. The session id goes in the X-Session-Id header
    of every later request.
    """
    session_id: str
    user: Dict[str, Any]


class UserResponse(BaseModel):
    user: Dict[str, Any]
    authenticated: bool = True
