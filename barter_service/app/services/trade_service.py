"""거래 투영 서비스.

Trade 는 accepted/completed 제안에서 읽을 때마다 새로 만들어지는 뷰다. 별도로 저장하거나
캐시하지 않으므로 항상 원본 제안의 현재 상태와 일치한다. 같은 제안 상태(와 같은 스킬
카탈로그)에 대해서는 항상 같은 Trade 가 나온다.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timezone

from fastapi import Depends

from ..models.credit import CreditTransactionType
from ..models.errors import ErrorCode
from ..models.proposal import (
    BarterProposal,
    CreditsForSkillProposal,
    ProposalResult,
    ProposalStatus,
    SkillForCreditsProposal,
    SkillForSkillProposal,
)
from ..models.skill import SkillCategory
from ..models.trade import (
    SkillExchangeDetails,
    SkillsDelivered,
    Trade,
    TradeAsset,
    TradeDetails,
    TradeListing,
    TradeMeetingDetails,
    TradeMilestone,
    TradeParticipant,
    TradeParticipants,
    TradeProgress,
    TradeStage,
    TradeStats,
    TradeStatus,
    proposal_id_from_trade_id,
    trade_id_for,
)
from ..repositories.interfaces import SkillOfferRepositoryInterface
from .credit_service import CreditService, get_credit_service
from .proposal_service import ProposalService, get_proposal_service
from .skill_service import get_skill_offer_repository


logger = logging.getLogger(__name__)


_TRADE_STATUSES = (ProposalStatus.ACCEPTED, ProposalStatus.COMPLETED)
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class TradeService:
    """제안 -> 거래 투영과 거래 통계."""

    def __init__(
        self,
        proposal_service: ProposalService,
        credit_service: CreditService,
        skill_repo: SkillOfferRepositoryInterface,
    ) -> None:
        self._proposal_service = proposal_service
        self._credit_service = credit_service
        self._skill_repo = skill_repo

    # -------- Projection --------

    def list_for_user(self, user_id: str) -> TradeListing:
        """진행 중인 거래는 시작 시각 최신순, 완료된 거래는 완료 시각 최신순(없으면 뒤로)."""
        active: list[Trade] = []
        completed: list[Trade] = []
        for proposal in self._proposals_of(user_id):
            if proposal.status not in _TRADE_STATUSES:
                continue
            trade = self.to_trade(proposal)
            if trade.status == TradeStatus.COMPLETED:
                completed.append(trade)
            else:
                active.append(trade)

        active.sort(key=lambda t: t.started_at, reverse=True)
        completed.sort(
            key=lambda t: (t.completed_at is not None, t.completed_at or _EPOCH),
            reverse=True,
        )
        return TradeListing(active=active, completed=completed)

    def get_trade(self, trade_id: str) -> Trade | None:
        proposal_id = proposal_id_from_trade_id(trade_id)
        if proposal_id is None:
            return None
        proposal = self._proposal_service.get_proposal(proposal_id)
        if proposal is None or proposal.status not in _TRADE_STATUSES:
            return None
        return self.to_trade(proposal)

    def to_trade(self, proposal: BarterProposal) -> Trade:
        is_completed = proposal.status == ProposalStatus.COMPLETED

        meeting = None
        if proposal.has_meeting:
            meeting = TradeMeetingDetails(
                location=proposal.meeting_location,
                time=proposal.meeting_time,
                notes=proposal.meeting_notes,
            )

        return Trade(
            id=trade_id_for(proposal.proposal_id),
            proposal_id=proposal.proposal_id,
            proposal_type=proposal.proposal_type,
            participants=TradeParticipants(
                offerer=TradeParticipant(
                    id=proposal.from_user_id,
                    name=proposal.from_user_name,
                    avatar=proposal.from_user_avatar,
                ),
                receiver=TradeParticipant(
                    id=proposal.to_user_id,
                    name=proposal.to_user_name,
                    avatar=proposal.to_user_avatar,
                ),
            ),
            trade_details=self._trade_details(proposal),
            status=TradeStatus.COMPLETED if is_completed else TradeStatus.ACTIVE,
            progress=TradeProgress(
                stage=TradeStage.COMPLETED if is_completed else TradeStage.PLANNING,
                milestones=generate_milestones(proposal),
                skills_delivered=SkillsDelivered(
                    offerer_skill_delivered=is_completed
                    and not isinstance(proposal, CreditsForSkillProposal),
                    receiver_skill_delivered=is_completed
                    and not isinstance(proposal, SkillForCreditsProposal),
                ),
            ),
            meeting_details=meeting,
            skill_exchange_details=(
                SkillExchangeDetails()
                if isinstance(proposal, SkillForSkillProposal)
                else None
            ),
            started_at=proposal.responded_at or proposal.created_at,
            completed_at=proposal.completed_at,
        )

    # -------- Commands --------

    def complete_trade(self, proposal_id: str, user_id: str) -> ProposalResult:
        """참여자 본인이 거래 완료를 확정한다."""
        proposal = self._proposal_service.get_proposal(proposal_id)
        if proposal is None:
            return ProposalResult.fail(ErrorCode.NOT_FOUND, "Proposal not found")
        if proposal.status != ProposalStatus.ACCEPTED:
            return ProposalResult.fail(
                ErrorCode.INVALID_TRANSITION,
                "Trade must be accepted before completion",
                proposal=proposal,
            )
        if not proposal.involves(user_id):
            return ProposalResult.fail(
                ErrorCode.NOT_PARTICIPANT,
                "You are not a participant in this trade",
                proposal=proposal,
            )
        return self._proposal_service.complete(proposal_id, actor_id=user_id)

    # -------- Stats --------

    def stats_for(self, user_id: str) -> TradeStats:
        listing = self.list_for_user(user_id)

        earned = 0
        spent = 0
        learned = 0
        taught = 0
        categories: Counter[SkillCategory] = Counter()

        for proposal in self._proposals_of(user_id):
            if proposal.status != ProposalStatus.COMPLETED:
                continue
            is_proposer = proposal.from_user_id == user_id

            # skill-for-skill 은 양쪽 모두 가르치고 배우므로 역할과 무관하게 둘 다 센다.
            if isinstance(proposal, SkillForSkillProposal):
                taught += 1
                learned += 1
            elif isinstance(proposal, CreditsForSkillProposal):
                if is_proposer:
                    learned += 1
                    spent += proposal.offered_credits
                else:
                    taught += 1
                    earned += proposal.offered_credits
            elif isinstance(proposal, SkillForCreditsProposal):
                if is_proposer:
                    taught += 1
                    earned += proposal.requested_credits
                else:
                    learned += 1
                    spent += proposal.requested_credits

            skill_id = (
                getattr(proposal, "offered_skill_id", None)
                if is_proposer
                else getattr(proposal, "requested_skill_id", None)
            )
            category = self._category_of(skill_id)
            if category is not None:
                categories[category] += 1

        earned += sum(
            tx.amount
            for tx in self._credit_service.transactions_for(user_id)
            if tx.type == CreditTransactionType.BONUS and tx.to_user_id == user_id
        )

        active_count = len(listing.active)
        completed_count = len(listing.completed)
        total = active_count + completed_count
        # 0.5 는 올림한다. round() 는 짝수 쪽으로 보내므로 정수 연산으로 계산한다.
        success_rate = (
            (200 * completed_count + total) // (2 * total) if total > 0 else 0
        )

        return TradeStats(
            total_trades=total,
            active_trades=active_count,
            completed_trades=completed_count,
            success_rate=success_rate,
            total_credits_earned=earned,
            total_credits_spent=spent,
            skills_learned=learned,
            skills_taught=taught,
            favorite_category=_favorite_category(categories),
        )

    # -------- Internals --------

    def _proposals_of(self, user_id: str) -> list[BarterProposal]:
        listing = self._proposal_service.list_for_user(user_id)
        return [*listing.sent, *listing.received]

    def _category_of(self, skill_id: str | None) -> SkillCategory | None:
        if not skill_id:
            return None
        offer = self._skill_repo.find_by_id(skill_id)
        return offer.category if offer is not None else None

    def _trade_details(self, proposal: BarterProposal) -> TradeDetails:
        if isinstance(proposal, CreditsForSkillProposal):
            offered = TradeAsset(type="credits", credits=proposal.offered_credits)
        else:
            offered = self._skill_asset(
                proposal.offered_skill_id, proposal.offered_skill_title
            )

        if isinstance(proposal, SkillForCreditsProposal):
            requested = TradeAsset(type="credits", credits=proposal.requested_credits)
        else:
            requested = self._skill_asset(
                proposal.requested_skill_id, proposal.requested_skill_title
            )

        return TradeDetails(offered=offered, requested=requested)

    def _skill_asset(self, skill_id: str, title: str) -> TradeAsset:
        return TradeAsset(
            type="skill",
            skill_id=skill_id,
            skill_title=title,
            skill_category=self._category_of(skill_id),
        )


def _favorite_category(categories: Counter[SkillCategory]) -> SkillCategory | None:
    """가장 많이 나온 카테고리. 동률이면 나중에 처음 등장한 카테고리를 고른다."""
    favorite: SkillCategory | None = None
    for category, count in categories.items():
        if favorite is None or count >= categories[favorite]:
            favorite = category
    return favorite


def generate_milestones(proposal: BarterProposal) -> list[TradeMilestone]:
    """제안 타입과 상태로부터 거래 체크리스트를 만든다.

    공통 2개(agreement, meeting_scheduled) + 타입별 2~3개 + 마지막 trade_completed.
    skill-for-skill 은 5개, 크레딧이 오가는 타입은 6개다.
    """
    accepted = proposal.status in _TRADE_STATUSES
    completed = proposal.status == ProposalStatus.COMPLETED

    def at_accept(done: bool) -> datetime | None:
        return proposal.responded_at if done else None

    def at_complete(done: bool) -> datetime | None:
        return proposal.completed_at if done else None

    milestones = [
        TradeMilestone(
            id="agreement",
            title="Agreement Reached",
            description="Both parties have agreed to the trade terms",
            is_completed=accepted,
            completed_at=at_accept(accepted),
            skill_related=False,
        ),
        TradeMilestone(
            id="meeting_scheduled",
            title="Meeting Scheduled",
            description="Time and place for the skill exchange has been set",
            is_completed=proposal.has_meeting,
            completed_at=at_accept(proposal.has_meeting),
            skill_related=True,
        ),
    ]

    if isinstance(proposal, SkillForSkillProposal):
        milestones += [
            TradeMilestone(
                id="skill_1_delivered",
                title=f"{proposal.offered_skill_title} Session Completed",
                description=f"{proposal.from_user_name} has taught their skill",
                is_completed=completed,
                completed_at=at_complete(completed),
                skill_related=True,
            ),
            TradeMilestone(
                id="skill_2_delivered",
                title=f"{proposal.requested_skill_title} Session Completed",
                description=f"{proposal.to_user_name} has taught their skill",
                is_completed=completed,
                completed_at=at_complete(completed),
                skill_related=True,
            ),
        ]
    elif isinstance(proposal, CreditsForSkillProposal):
        milestones += [
            TradeMilestone(
                id="credits_transferred",
                title="Credits Transferred",
                description=(
                    f"{proposal.offered_credits} credits transferred to {proposal.to_user_name}"
                ),
                is_completed=accepted,
                completed_at=at_accept(accepted),
                skill_related=False,
            ),
            TradeMilestone(
                id="skill_delivered",
                title=f"{proposal.requested_skill_title} Session Completed",
                description=f"{proposal.to_user_name} has taught their skill",
                is_completed=completed,
                completed_at=at_complete(completed),
                skill_related=True,
            ),
            TradeMilestone(
                id="delivery_confirmed",
                title="Delivery Confirmed",
                description=f"{proposal.from_user_name} has confirmed the session",
                is_completed=completed,
                completed_at=at_complete(completed),
                skill_related=False,
            ),
        ]
    elif isinstance(proposal, SkillForCreditsProposal):
        milestones += [
            TradeMilestone(
                id="skill_delivered",
                title=f"{proposal.offered_skill_title} Session Completed",
                description=f"{proposal.from_user_name} has taught their skill",
                is_completed=completed,
                completed_at=at_complete(completed),
                skill_related=True,
            ),
            TradeMilestone(
                id="credits_transferred",
                title="Credits Received",
                description=(
                    f"{proposal.requested_credits} credits transferred to {proposal.from_user_name}"
                ),
                is_completed=completed,
                completed_at=at_complete(completed),
                skill_related=False,
            ),
            TradeMilestone(
                id="delivery_confirmed",
                title="Delivery Confirmed",
                description=f"{proposal.to_user_name} has confirmed the session",
                is_completed=completed,
                completed_at=at_complete(completed),
                skill_related=False,
            ),
        ]

    milestones.append(
        TradeMilestone(
            id="trade_completed",
            title="Trade Completed & Rated",
            description="Both parties have confirmed the successful skill exchange",
            is_completed=completed,
            completed_at=at_complete(completed),
            skill_related=True,
        )
    )
    return milestones


def get_trade_service(
    proposal_service: ProposalService = Depends(get_proposal_service),
    credit_service: CreditService = Depends(get_credit_service),
    skill_repo: SkillOfferRepositoryInterface = Depends(get_skill_offer_repository),
) -> TradeService:
    """FastAPI DI용 TradeService 팩토리."""

    return TradeService(
        proposal_service=proposal_service,
        credit_service=credit_service,
        skill_repo=skill_repo,
    )
