"""스킬 오퍼 카탈로그.

유저가 가르칠 수 있는 스킬을 등록하고 조회한다. 거래 뷰의 skill_category 와
통계의 favorite_category 는 이 카탈로그에서 찾는다.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import Depends
from pydantic import BaseModel, Field
from pymongo.database import Database

from common.mongo.client import get_database
from common.types.datetime import utc_now

from ..models.skill import SkillCategory, SkillOffer
from ..repositories.interfaces import SkillOfferRepositoryInterface
from ..repositories.skill_repository import SkillOfferRepository
from .user_directory import UserDirectory, get_user_directory


logger = logging.getLogger(__name__)


class SkillOfferInput(BaseModel):
    """스킬 오퍼 등록 입력. skill_id, created_at 은 서버가 채운다."""

    user_id: str
    title: str = Field(min_length=1)
    description: str = ""
    category: SkillCategory = SkillCategory.OTHER
    tags: list[str] = Field(default_factory=list)
    location: str | None = None
    availability: str = ""


class SkillService:
    def __init__(
        self,
        skill_repo: SkillOfferRepositoryInterface,
        directory: UserDirectory,
    ) -> None:
        self._skill_repo = skill_repo
        self._directory = directory

    def add_offer(self, input_model: SkillOfferInput) -> SkillOffer | None:
        """오퍼를 등록한다. 등록하는 유저가 없으면 None."""
        if self._directory.get(input_model.user_id) is None:
            logger.warning(
                "skill offer rejected: user not found",
                extra={"user_id": input_model.user_id},
            )
            return None

        offer = SkillOffer(
            skill_id=str(uuid.uuid4()),
            created_at=utc_now(),
            **input_model.model_dump(),
        )
        created = self._skill_repo.insert(offer)
        logger.info(
            "skill offer added (skill_id=%s, category=%s)",
            created.skill_id,
            created.category,
            extra={"user_id": created.user_id},
        )
        return created

    def get_offer(self, skill_id: str) -> SkillOffer | None:
        return self._skill_repo.find_by_id(skill_id)

    def list_offers(
        self,
        user_id: str | None = None,
        include_inactive: bool = False,
    ) -> list[SkillOffer]:
        """최신순 오퍼 목록. 기본적으로 활성 오퍼만 돌려준다."""
        return [
            offer
            for offer in self._skill_repo.list_all()
            if (include_inactive or offer.is_active)
            and (user_id is None or offer.user_id == user_id)
        ]


def get_skill_offer_repository(
    db: Database = Depends(get_database),
) -> SkillOfferRepositoryInterface:
    """FastAPI DI용 SkillOfferRepository 팩토리."""

    return SkillOfferRepository(db)


def get_skill_service(
    skill_repo: SkillOfferRepositoryInterface = Depends(get_skill_offer_repository),
    directory: UserDirectory = Depends(get_user_directory),
) -> SkillService:
    """FastAPI DI용 SkillService 팩토리."""

    return SkillService(skill_repo=skill_repo, directory=directory)
