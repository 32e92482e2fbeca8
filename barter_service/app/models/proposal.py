"""바터 제안 도메인 모델.

제안은 proposal_type 으로 구분되는 세 가지 variant 중 하나다.

- skill-for-skill:   offered_skill_* + requested_skill_*
- credits-for-skill: offered_credits + requested_skill_*
- skill-for-credits: offered_skill_* + requested_credits

각 variant 는 자기 payload 필드만 허용하므로(extra="forbid") 타입과 맞지 않는
payload 는 생성 시점에 검증 오류가 된다.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, TypeAdapter

from common.types.datetime import UtcDateTime

from .errors import ErrorCode


class ProposalType(StrEnum):
    SKILL_FOR_SKILL = "skill-for-skill"
    CREDITS_FOR_SKILL = "credits-for-skill"
    SKILL_FOR_CREDITS = "skill-for-credits"


class ProposalStatus(StrEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = frozenset(
    {ProposalStatus.DECLINED, ProposalStatus.COMPLETED, ProposalStatus.CANCELLED}
)

# 각 상태에서 허용되는 다음 상태. 여기에 없는 전이는 모두 invalid_transition 이다.
ALLOWED_TRANSITIONS: dict[ProposalStatus, frozenset[ProposalStatus]] = {
    ProposalStatus.PENDING: frozenset(
        {ProposalStatus.ACCEPTED, ProposalStatus.DECLINED, ProposalStatus.CANCELLED}
    ),
    ProposalStatus.ACCEPTED: frozenset({ProposalStatus.COMPLETED}),
}


NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
PositiveCredits = Annotated[int, Field(gt=0)]


class MeetingDetails(BaseModel):
    """수락 시점에 채워지는 만남 정보."""

    location: str | None = None
    time: UtcDateTime | None = None
    notes: str | None = None

    def is_empty(self) -> bool:
        return not (self.location or self.time or self.notes)


class _ProposalBase(BaseModel):
    model_config = ConfigDict(extra="forbid")

    proposal_id: str
    from_user_id: NonEmptyStr
    from_user_name: str
    from_user_avatar: str | None = None
    to_user_id: NonEmptyStr
    to_user_name: str
    to_user_avatar: str | None = None

    message: str = ""
    status: ProposalStatus = ProposalStatus.PENDING
    created_at: UtcDateTime
    responded_at: UtcDateTime | None = None
    completed_at: UtcDateTime | None = None

    meeting_location: str | None = None
    meeting_time: UtcDateTime | None = None
    meeting_notes: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def has_meeting(self) -> bool:
        return bool(self.meeting_location or self.meeting_time)

    def involves(self, user_id: str) -> bool:
        return user_id in (self.from_user_id, self.to_user_id)


class SkillForSkillProposal(_ProposalBase):
    proposal_type: Literal["skill-for-skill"] = "skill-for-skill"
    offered_skill_id: NonEmptyStr
    offered_skill_title: str
    requested_skill_id: NonEmptyStr
    requested_skill_title: str


class CreditsForSkillProposal(_ProposalBase):
    proposal_type: Literal["credits-for-skill"] = "credits-for-skill"
    offered_credits: PositiveCredits
    requested_skill_id: NonEmptyStr
    requested_skill_title: str


class SkillForCreditsProposal(_ProposalBase):
    proposal_type: Literal["skill-for-credits"] = "skill-for-credits"
    offered_skill_id: NonEmptyStr
    offered_skill_title: str
    requested_credits: PositiveCredits


BarterProposal = Annotated[
    Union[SkillForSkillProposal, CreditsForSkillProposal, SkillForCreditsProposal],
    Field(discriminator="proposal_type"),
]

proposal_adapter: TypeAdapter[BarterProposal] = TypeAdapter(BarterProposal)


def parse_proposal(data: dict) -> BarterProposal:
    """dict 를 proposal_type 에 맞는 variant 로 검증한다. 실패 시 pydantic.ValidationError."""
    return proposal_adapter.validate_python(data)


class ProposalListing(BaseModel):
    sent: list[BarterProposal] = Field(default_factory=list)
    received: list[BarterProposal] = Field(default_factory=list)


class ProposalResult(BaseModel):
    """제안 명령(create/accept/decline/cancel/complete) 결과.

    - 성공 시 proposal 에 갱신된 제안이 담긴다.
    - credit_transfer_failed 인 경우 cause 에 원래의 원장 오류 코드가 담긴다.
    """

    proposal: BarterProposal | None = None
    error: ErrorCode | None = None
    message: str | None = None
    cause: ErrorCode | None = None

    @property
    def success(self) -> bool:
        return self.error is None and self.proposal is not None

    @classmethod
    def ok(cls, proposal: BarterProposal) -> "ProposalResult":
        return cls(proposal=proposal)

    @classmethod
    def fail(
        cls,
        error: ErrorCode,
        message: str,
        *,
        cause: ErrorCode | None = None,
        proposal: BarterProposal | None = None,
    ) -> "ProposalResult":
        return cls(error=error, message=message, cause=cause, proposal=proposal)

