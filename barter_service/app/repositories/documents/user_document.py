from __future__ import annotations

from common.models.user import User
from common.mongo.types import (
    BaseDocument,
    MongoDateTime,
    build_document_data_from_domain,
)


class UserDocument(BaseDocument):
    """MongoDB users 컬렉션 도큐먼트 모델."""

    user_id: str
    name: str
    email: str
    avatar: str | None = None
    bio: str | None = None
    location: str | None = None
    skills_offered: list[str] = []
    skills_wanted: list[str] = []
    credits: int
    rating: float
    completed_trades: int
    joined_at: MongoDateTime
    updated_at: MongoDateTime

    @classmethod
    def from_domain(cls, user: User) -> "UserDocument":
        data = build_document_data_from_domain(user)
        return cls.model_validate(data)

    def to_domain(self) -> User:
        return User.model_validate(self.to_domain_data())
