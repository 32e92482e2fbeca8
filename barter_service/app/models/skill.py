from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

from common.types.datetime import UtcDateTime


class SkillCategory(StrEnum):
    TEACHING = "teaching"
    REPAIRS = "repairs"
    COOKING = "cooking"
    TECHNOLOGY = "technology"
    ARTS_CRAFTS = "arts-crafts"
    FITNESS = "fitness"
    MUSIC = "music"
    LANGUAGES = "languages"
    GARDENING = "gardening"
    OTHER = "other"


class SkillOffer(BaseModel):
    """유저가 가르칠 수 있다고 등록한 스킬.

    거래 뷰에서 카테고리를 채우거나 통계의 선호 카테고리를 계산할 때만 조회한다.
    """

    skill_id: str
    user_id: str
    title: str
    description: str = ""
    category: SkillCategory = SkillCategory.OTHER
    tags: list[str] = Field(default_factory=list)
    location: str | None = None
    availability: str = ""
    is_active: bool = True
    created_at: UtcDateTime
