from __future__ import annotations

from pydantic import BaseModel, Field

from common.models.user import User
from common.types.datetime import UtcDateTime


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = ""
    avatar: str | None = None
    bio: str | None = None
    location: str | None = None
    skills_offered: list[str] = Field(default_factory=list)
    skills_wanted: list[str] = Field(default_factory=list)


class LoginRequest(BaseModel):
    email: str
    # 비밀번호는 검증하지 않는다.
    password: str = ""


class UserResponse(BaseModel):
    user_id: str
    name: str
    email: str
    avatar: str | None
    bio: str | None
    location: str | None
    skills_offered: list[str]
    skills_wanted: list[str]
    credits: int
    rating: float
    completed_trades: int
    joined_at: UtcDateTime
    updated_at: UtcDateTime

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            user_id=user.user_id,
            name=user.name,
            email=user.email,
            avatar=user.avatar,
            bio=user.bio,
            location=user.location,
            skills_offered=list(user.skills_offered),
            skills_wanted=list(user.skills_wanted),
            credits=user.credits,
            rating=user.rating,
            completed_trades=user.completed_trades,
            joined_at=user.joined_at,
            updated_at=user.updated_at,
        )


class ListUsersResponse(BaseModel):
    total: int
    items: list[UserResponse]
