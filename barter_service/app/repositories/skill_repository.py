from __future__ import annotations

from pymongo.database import Database

from common.mongo.client import SKILL_OFFERS_COLLECTION

from .documents.skill_document import SkillOfferDocument
from .interfaces import SkillOfferRepositoryInterface
from ..models.skill import SkillOffer


class SkillOfferRepository(SkillOfferRepositoryInterface):
    """skill_offers 컬렉션에 대한 MongoDB 접근 레이어."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database[SKILL_OFFERS_COLLECTION]

    def insert(self, offer: SkillOffer) -> SkillOffer:
        payload = SkillOfferDocument.from_domain(offer).to_mongo_record()
        self._col.insert_one(payload)
        return SkillOfferDocument.model_validate(payload).to_domain()

    def find_by_id(self, skill_id: str) -> SkillOffer | None:
        doc = self._col.find_one({"skill_id": skill_id})
        if not doc:
            return None
        return SkillOfferDocument.model_validate(doc).to_domain()

    def list_all(self) -> list[SkillOffer]:
        cursor = self._col.find({}, sort=[("created_at", -1), ("_id", -1)])
        return [SkillOfferDocument.model_validate(doc).to_domain() for doc in cursor]
