"""
API schemas for user endpoints
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    """Schema for registering a new user"""
    username: str = Field(..., min_length=3, max_length=50)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    gaming_platform: Optional[str] = Field(None, max_length=50)
    preferred_game: Optional[str] = Field(None, max_length=100)
    skill_level: Optional[str] = Field(None, max_length=50)


class UserUpdate(BaseModel):
    """Schema for updating a user profile"""
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[str] = Field(None, min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    gaming_platform: Optional[str] = Field(None, max_length=50)
    preferred_game: Optional[str] = Field(None, max_length=100)
    skill_level: Optional[str] = Field(None, max_length=50)


class UserResponse(BaseModel):
    id: str
    username: str
    email: str
    gaming_platform: Optional[str] = None
    preferred_game: Optional[str] = None
    skill_level: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
