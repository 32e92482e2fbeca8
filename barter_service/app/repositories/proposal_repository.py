from __future__ import annotations

from pymongo.database import Database

from common.mongo.client import PROPOSALS_COLLECTION

from .documents.proposal_document import ProposalDocument
from .interfaces import ProposalRepositoryInterface
from ..models.proposal import BarterProposal


# 생성 순. created_at 이 같으면 삽입 순(_id)으로 정렬한다.
_CREATION_ORDER = [("created_at", 1), ("_id", 1)]


class ProposalRepository(ProposalRepositoryInterface):
    """proposals 컬렉션에 대한 MongoDB 접근 레이어."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database[PROPOSALS_COLLECTION]

    @staticmethod
    def _from_document(doc: dict) -> BarterProposal:
        return ProposalDocument.model_validate(doc).to_domain()

    def insert(self, proposal: BarterProposal) -> BarterProposal:
        payload = ProposalDocument.from_domain(proposal).to_mongo_record()
        self._col.insert_one(payload)
        return self._from_document(payload)

    def save(self, proposal: BarterProposal) -> BarterProposal:
        payload = ProposalDocument.from_domain(proposal).to_mongo_record()
        result = self._col.replace_one({"proposal_id": proposal.proposal_id}, payload)
        if result.matched_count == 0:
            raise RuntimeError(
                f"proposal not found for update (proposal_id={proposal.proposal_id})"
            )
        return self._from_document(payload)

    def find_by_id(self, proposal_id: str) -> BarterProposal | None:
        doc = self._col.find_one({"proposal_id": proposal_id})
        if not doc:
            return None
        return self._from_document(doc)

    def list_all(self) -> list[BarterProposal]:
        return [
            self._from_document(doc) for doc in self._col.find({}, sort=_CREATION_ORDER)
        ]

    def list_sent(self, user_id: str) -> list[BarterProposal]:
        cursor = self._col.find({"from_user_id": user_id}, sort=_CREATION_ORDER)
        return [self._from_document(doc) for doc in cursor]

    def list_received(self, user_id: str) -> list[BarterProposal]:
        cursor = self._col.find({"to_user_id": user_id}, sort=_CREATION_ORDER)
        return [self._from_document(doc) for doc in cursor]
