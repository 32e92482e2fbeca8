from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, Field
from pydantic.functional_validators import AfterValidator

from common.types.datetime import UtcDateTime


def _dedupe(values: list[str]) -> list[str]:
    return list(dict.fromkeys(v.strip() for v in values if v.strip()))


# 스킬 목록은 순서를 유지하는 집합으로 다룬다.
SkillNames = Annotated[list[str], AfterValidator(_dedupe)]


class User(BaseModel):
    """유저 도메인 모델.

    - Mongo users 컬렉션과 1:1로 매핑되는 공용 모델이다.
    - credits 는 0 이상이어야 하지만 여기서는 검증하지 않는다.
      잔액을 바꾸는 쪽(CreditService, ProposalService)이 음수를 쓰지 않을 책임을 진다.
    """

    user_id: str
    name: str
    email: str
    avatar: str | None = None
    bio: str | None = None
    location: str | None = None
    skills_offered: SkillNames = Field(default_factory=list)
    skills_wanted: SkillNames = Field(default_factory=list)
    credits: int = 0
    rating: float = 5.0
    completed_trades: int = 0
    joined_at: UtcDateTime
    updated_at: UtcDateTime


class UserRegisterInput(BaseModel):
    """회원가입 입력 모델.

    id, credits, rating, completed_trades, joined_at 은 서버가 채운다.
    """

    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    avatar: str | None = None
    bio: str | None = None
    location: str | None = None
    skills_offered: SkillNames = Field(default_factory=list)
    skills_wanted: SkillNames = Field(default_factory=list)
