"""Pydantic schemas for registration, login and the user profile."""
from datetime import date

from pydantic import BaseModel, Field


class RegisterSchema(BaseModel):
    email: str = Field(max_length=255)
    password: str = Field(min_length=8, max_length=128)
    display_name: str | None = Field(default=None, max_length=50)
    timezone: str | None = Field(default=None, max_length=64)


class LoginSchema(BaseModel):
    email: str
    password: str


class ProfileUpdateSchema(BaseModel):
    display_name: str | None = Field(default=None, min_length=2, max_length=50)
    timezone: str | None = Field(default=None, max_length=64)


class UserOutSchema(BaseModel):
    id: int
    email: str
    display_name: str | None
    total_xp: int
    timezone: str | None
    streak_count: int
    last_activity_date: date | None
    daily_goal_xp: int

    class Config:
        from_attributes = True


class TokenSchema(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOutSchema
