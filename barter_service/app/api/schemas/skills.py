from __future__ import annotations

from pydantic import BaseModel, Field

from common.types.datetime import UtcDateTime

from ...models.skill import SkillCategory, SkillOffer


class CreateSkillOfferRequest(BaseModel):
    user_id: str
    title: str = Field(min_length=1)
    description: str = ""
    category: SkillCategory = SkillCategory.OTHER
    tags: list[str] = Field(default_factory=list)
    location: str | None = None
    availability: str = ""


class SkillOfferResponse(BaseModel):
    skill_id: str
    user_id: str
    title: str
    description: str
    category: SkillCategory
    tags: list[str]
    location: str | None
    availability: str
    is_active: bool
    created_at: UtcDateTime

    @classmethod
    def from_domain(cls, offer: SkillOffer) -> "SkillOfferResponse":
        return cls(**offer.model_dump())


class ListSkillOffersResponse(BaseModel):
    total: int
    items: list[SkillOfferResponse]
