"""제안 MongoDB 도큐먼트.

세 가지 proposal variant 를 한 컬렉션에 평평하게 저장한다. 해당 variant 에 없는
payload 필드는 저장하지 않고(exclude_none), 읽을 때 proposal_type 으로 다시 variant 를
고른다.
"""

from __future__ import annotations

from common.mongo.types import (
    BaseDocument,
    MongoDateTime,
    build_document_data_from_domain,
)

from ...models.proposal import BarterProposal, parse_proposal


class ProposalDocument(BaseDocument):
    """MongoDB proposals 컬렉션 도큐먼트 모델."""

    proposal_id: str
    proposal_type: str
    status: str

    from_user_id: str
    from_user_name: str
    from_user_avatar: str | None = None
    to_user_id: str
    to_user_name: str
    to_user_avatar: str | None = None

    offered_skill_id: str | None = None
    offered_skill_title: str | None = None
    offered_credits: int | None = None
    requested_skill_id: str | None = None
    requested_skill_title: str | None = None
    requested_credits: int | None = None

    message: str = ""
    created_at: MongoDateTime
    responded_at: MongoDateTime | None = None
    completed_at: MongoDateTime | None = None

    meeting_location: str | None = None
    meeting_time: MongoDateTime | None = None
    meeting_notes: str | None = None

    @classmethod
    def from_domain(cls, proposal: BarterProposal) -> "ProposalDocument":
        data = build_document_data_from_domain(proposal)
        return cls.model_validate(data)

    def to_domain(self) -> BarterProposal:
        return parse_proposal(self.to_domain_data())
