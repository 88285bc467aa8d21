from datetime import datetime
from typing import List, Optional
from pydantic import Field

from app.schemas.registry import FormModel


class UserCredentials(FormModel):
    """Login form plus the client agent string captured from the request."""
    username: str = Field(..., description="User name")
    password: str = Field(..., description="Plaintext password as typed")
    user_agent: Optional[str] = Field(None, description="User-Agent of the logging-in client")


class UserRegistration(FormModel):
    username: str = Field(..., description="User name, unique across the store")
    password: str = Field(..., description="Plaintext password")
    password2: str = Field(..., description="Password confirmation")
    email: Optional[str] = Field(None, description="Contact email")


class LoginEvent(FormModel):
    date_time: datetime = Field(..., description="When the login happened")
    user_agent: Optional[str] = Field(None, description="Client agent string")


class UserRecord(FormModel):
    """A user as returned to callers: the password hash is never part of it."""
    username: str
    email: Optional[str] = None
    login_history: List[LoginEvent] = Field(default_factory=list)

    model_config = {"from_attributes": True}
