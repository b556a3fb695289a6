from pydantic import BaseModel, ConfigDict, EmailStr
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime


class UserCredentials(BaseModel):
    """Body of signup and login requests."""
    email: EmailStr
    password: str


class LoginRequest(BaseModel):
    # Plain str: a malformed address is just another failed login.
    email: str
    password: str


class ProfileUpdate(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = None


class User(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    email: Optional[str] = None
    google_id: Optional[str] = None


class UserDetail(User):
    created_at: datetime
    updated_at: datetime


class AuthResponse(BaseModel):
    message: str
    user: User
    token: str


class UserResponse(BaseModel):
    message: str
    user: UserDetail


class MessageResponse(BaseModel):
    message: str
