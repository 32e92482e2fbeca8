from __future__ import annotations

from common.mongo.types import (
    BaseDocument,
    MongoDateTime,
    build_document_data_from_domain,
)

from ...models.skill import SkillOffer


class SkillOfferDocument(BaseDocument):
    """MongoDB skill_offers 컬렉션 도큐먼트 모델."""

    skill_id: str
    user_id: str
    title: str
    description: str = ""
    category: str
    tags: list[str] = []
    location: str | None = None
    availability: str = ""
    is_active: bool = True
    created_at: MongoDateTime

    @classmethod
    def from_domain(cls, offer: SkillOffer) -> "SkillOfferDocument":
        return cls.model_validate(build_document_data_from_domain(offer))

    def to_domain(self) -> SkillOffer:
        return SkillOffer.model_validate(self.to_domain_data())
