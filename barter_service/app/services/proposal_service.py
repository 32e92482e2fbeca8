"""바터 제안 상태 머신.

    pending  --accept-->   accepted  --complete-->  completed
    pending  --decline-->  declined
    pending  --cancel-->   cancelled

declined / cancelled / completed 는 종료 상태이며 어떤 이벤트도 받지 않는다.
상태 전이와 그에 딸린 크레딧 이동은 원장 락 안에서 한 단위로 처리된다.
크레딧 이동이 실패하면 상태는 바뀌지 않는다.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Mapping
from typing import Any

from fastapi import Depends
from pydantic import ValidationError
from pymongo.database import Database

from common.mongo.client import get_database
from common.types.datetime import utc_now

from ..config import AppConfig, EconomyConfig, get_app_config
from ..models.credit import CreditResult
from ..models.errors import ErrorCode
from ..models.proposal import (
    ALLOWED_TRANSITIONS,
    BarterProposal,
    CreditsForSkillProposal,
    MeetingDetails,
    ProposalListing,
    ProposalResult,
    ProposalStatus,
    SkillForCreditsProposal,
    parse_proposal,
)
from ..repositories.interfaces import ProposalRepositoryInterface
from ..repositories.proposal_repository import ProposalRepository
from .credit_service import CreditService, get_credit_service
from .ledger_lock import get_ledger_lock
from .user_directory import UserDirectory, get_user_directory


logger = logging.getLogger(__name__)


# 생성 시 서버가 채우는 필드. 호출자가 보낸 값은 무시한다.
_SERVER_MANAGED_FIELDS = (
    "proposal_id",
    "status",
    "created_at",
    "responded_at",
    "completed_at",
    "meeting_location",
    "meeting_time",
    "meeting_notes",
)


class ProposalService:
    """제안 생성과 상태 전이를 담당한다."""

    def __init__(
        self,
        proposal_repo: ProposalRepositoryInterface,
        credit_service: CreditService,
        directory: UserDirectory,
        economy: EconomyConfig | None = None,
        lock: threading.RLock | None = None,
    ) -> None:
        self._proposal_repo = proposal_repo
        self._credit_service = credit_service
        self._directory = directory
        self._economy = economy or EconomyConfig()
        self._lock = lock or get_ledger_lock()

    # -------- Queries --------

    def get_proposal(self, proposal_id: str) -> BarterProposal | None:
        return self._proposal_repo.find_by_id(proposal_id)

    def list_for_user(self, user_id: str) -> ProposalListing:
        """user_id 가 보낸 제안과 받은 제안."""
        return ProposalListing(
            sent=self._proposal_repo.list_sent(user_id),
            received=self._proposal_repo.list_received(user_id),
        )

    # -------- Commands --------

    def create_proposal(self, payload: Mapping[str, Any]) -> ProposalResult:
        """proposal_type 에 맞는 payload 인지 검증한 뒤 pending 상태로 저장한다."""
        data = {
            key: value
            for key, value in payload.items()
            if key not in _SERVER_MANAGED_FIELDS
        }
        data.update(
            proposal_id=str(uuid.uuid4()),
            status=ProposalStatus.PENDING,
            created_at=utc_now(),
        )

        try:
            proposal = parse_proposal(data)
        except ValidationError as exc:
            message = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in exc.errors()
            )
            logger.warning("proposal rejected: %s", message)
            return ProposalResult.fail(ErrorCode.VALIDATION_ERROR, message)

        if proposal.from_user_id == proposal.to_user_id:
            return ProposalResult.fail(
                ErrorCode.VALIDATION_ERROR, "Cannot send a proposal to yourself"
            )

        with self._lock:
            created = self._proposal_repo.insert(proposal)

        logger.info(
            "proposal created (type=%s, from=%s, to=%s)",
            created.proposal_type,
            created.from_user_id,
            created.to_user_id,
            extra={"proposal_id": created.proposal_id},
        )
        return ProposalResult.ok(created)

    def accept(
        self,
        proposal_id: str,
        meeting: MeetingDetails | None = None,
        actor_id: str | None = None,
    ) -> ProposalResult:
        """수락. 제안 타입에 따라 크레딧을 이체하고, 실패하면 pending 으로 남긴다."""
        with self._lock:
            proposal, failure = self._load_for(
                proposal_id, ProposalStatus.ACCEPTED, actor_id, allowed_actors="recipient"
            )
            if failure is not None:
                return failure
            assert proposal is not None

            transfer = self._settle_on_accept(proposal)
            if transfer is not None and not transfer.success:
                logger.warning(
                    "proposal accept aborted: credit transfer failed (%s)",
                    transfer.error,
                    extra={"proposal_id": proposal_id, "error_code": str(transfer.error)},
                )
                return ProposalResult.fail(
                    ErrorCode.CREDIT_TRANSFER_FAILED,
                    transfer.message or "Credit transfer failed",
                    cause=transfer.error,
                    proposal=proposal,
                )

            update: dict[str, Any] = {
                "status": ProposalStatus.ACCEPTED,
                "responded_at": utc_now(),
            }
            if meeting is not None:
                update["meeting_location"] = meeting.location or proposal.meeting_location
                update["meeting_time"] = meeting.time or proposal.meeting_time
                update["meeting_notes"] = meeting.notes or proposal.meeting_notes

            return self._save(proposal, update)

    def decline(self, proposal_id: str, actor_id: str | None = None) -> ProposalResult:
        with self._lock:
            proposal, failure = self._load_for(
                proposal_id, ProposalStatus.DECLINED, actor_id, allowed_actors="recipient"
            )
            if failure is not None:
                return failure
            assert proposal is not None
            return self._save(
                proposal,
                {"status": ProposalStatus.DECLINED, "responded_at": utc_now()},
            )

    def cancel(self, proposal_id: str, actor_id: str | None = None) -> ProposalResult:
        with self._lock:
            proposal, failure = self._load_for(
                proposal_id, ProposalStatus.CANCELLED, actor_id, allowed_actors="proposer"
            )
            if failure is not None:
                return failure
            assert proposal is not None
            return self._save(
                proposal,
                {"status": ProposalStatus.CANCELLED, "responded_at": utc_now()},
            )

    def complete(self, proposal_id: str, actor_id: str | None = None) -> ProposalResult:
        """완료. 두 참여자에게 각각 보너스를 주고 completed_trades 를 1 씩 올린다."""
        with self._lock:
            proposal, failure = self._load_for(
                proposal_id, ProposalStatus.COMPLETED, actor_id, allowed_actors="either"
            )
            if failure is not None:
                return failure
            assert proposal is not None

            participants = (proposal.from_user_id, proposal.to_user_id)
            missing = [uid for uid in participants if self._directory.get(uid) is None]
            if missing:
                return ProposalResult.fail(
                    ErrorCode.NOT_FOUND,
                    f"Participant not found: {', '.join(missing)}",
                    proposal=proposal,
                )

            bonus = self._economy.completion_bonus
            if bonus > 0:
                self._credit_service.award_bonus(
                    proposal.from_user_id,
                    bonus,
                    f"Trade completion bonus for {_offered_label(proposal)}",
                )
                self._credit_service.award_bonus(
                    proposal.to_user_id,
                    bonus,
                    f"Trade completion bonus for {_requested_label(proposal)}",
                )

            now = utc_now()
            for user_id in participants:
                user = self._directory.get(user_id)
                assert user is not None
                self._directory.upsert(
                    user.model_copy(
                        update={
                            "completed_trades": user.completed_trades + 1,
                            "updated_at": now,
                        }
                    )
                )

            return self._save(
                proposal,
                {"status": ProposalStatus.COMPLETED, "completed_at": now},
            )

    # -------- Internals --------

    def _load_for(
        self,
        proposal_id: str,
        target: ProposalStatus,
        actor_id: str | None,
        *,
        allowed_actors: str,
    ) -> tuple[BarterProposal | None, ProposalResult | None]:
        proposal = self._proposal_repo.find_by_id(proposal_id)
        if proposal is None:
            logger.warning(
                "proposal not found", extra={"proposal_id": proposal_id}
            )
            return None, ProposalResult.fail(ErrorCode.NOT_FOUND, "Proposal not found")

        if target not in ALLOWED_TRANSITIONS.get(proposal.status, frozenset()):
            logger.warning(
                "invalid transition %s -> %s",
                proposal.status,
                target,
                extra={"proposal_id": proposal_id},
            )
            return None, ProposalResult.fail(
                ErrorCode.INVALID_TRANSITION,
                f"Cannot move proposal from {proposal.status} to {target}",
                proposal=proposal,
            )

        if actor_id is not None and not _actor_allowed(proposal, actor_id, allowed_actors):
            logger.warning(
                "actor %s may not move proposal to %s",
                actor_id,
                target,
                extra={"proposal_id": proposal_id, "user_id": actor_id},
            )
            return None, ProposalResult.fail(
                ErrorCode.NOT_PARTICIPANT,
                "You are not allowed to perform this action on the proposal",
                proposal=proposal,
            )

        return proposal, None

    def _settle_on_accept(self, proposal: BarterProposal) -> CreditResult | None:
        if isinstance(proposal, CreditsForSkillProposal):
            return self._credit_service.transfer(
                proposal.from_user_id,
                proposal.to_user_id,
                proposal.offered_credits,
                f"Payment for {proposal.requested_skill_title}",
                related_proposal_id=proposal.proposal_id,
            )
        if isinstance(proposal, SkillForCreditsProposal):
            return self._credit_service.transfer(
                proposal.to_user_id,
                proposal.from_user_id,
                proposal.requested_credits,
                f"Payment for {proposal.offered_skill_title}",
                related_proposal_id=proposal.proposal_id,
            )
        return None

    def _save(self, proposal: BarterProposal, update: dict[str, Any]) -> ProposalResult:
        saved = self._proposal_repo.save(proposal.model_copy(update=update))
        logger.info(
            "proposal %s -> %s",
            proposal.status,
            saved.status,
            extra={"proposal_id": saved.proposal_id},
        )
        return ProposalResult.ok(saved)


def _actor_allowed(proposal: BarterProposal, actor_id: str, allowed_actors: str) -> bool:
    if allowed_actors == "recipient":
        return actor_id == proposal.to_user_id
    if allowed_actors == "proposer":
        return actor_id == proposal.from_user_id
    return proposal.involves(actor_id)


def _offered_label(proposal: BarterProposal) -> str:
    return getattr(proposal, "offered_skill_title", None) or "credit trade"


def _requested_label(proposal: BarterProposal) -> str:
    return getattr(proposal, "requested_skill_title", None) or "credit trade"


def get_proposal_repository(
    db: Database = Depends(get_database),
) -> ProposalRepositoryInterface:
    """FastAPI DI용 ProposalRepository 팩토리."""

    return ProposalRepository(db)


def get_proposal_service(
    proposal_repo: ProposalRepositoryInterface = Depends(get_proposal_repository),
    credit_service: CreditService = Depends(get_credit_service),
    directory: UserDirectory = Depends(get_user_directory),
    config: AppConfig = Depends(get_app_config),
) -> ProposalService:
    """FastAPI DI용 ProposalService 팩토리."""

    return ProposalService(
        proposal_repo=proposal_repo,
        credit_service=credit_service,
        directory=directory,
        economy=config.economy,
    )
