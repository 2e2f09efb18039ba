from typing import Optional
from pydantic import BaseModel, EmailStr, ConfigDict
from datetime import datetime


class OnboardingRequest(BaseModel):
    full_name: str = ""
    bio: str = ""
    native_language: str = ""
    learning_language: str = ""
    location: str = ""
    profile_pic: Optional[str] = None


class UserSummary(BaseModel):
    """Public projection used when expanding friend requests and friend lists"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    profile_pic: str
    native_language: str
    learning_language: str


class User(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: EmailStr
    full_name: str
    profile_pic: str
    bio: str
    native_language: str
    learning_language: str
    location: str
    is_onboarded: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class UserProfile(UserSummary):
    """Public profile shown in recommendations; no email or account state"""
    bio: str
    location: str
