from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from ..errors import unwrap_proposal
from ..schemas.proposals import AcceptProposalRequest
from ...models.proposal import BarterProposal, ProposalListing
from ...services.proposal_service import ProposalService, get_proposal_service

router = APIRouter()


@router.post(
    "",
    response_model=BarterProposal,
    status_code=status.HTTP_201_CREATED,
    summary="제안 생성",
)
async def create_proposal(
    body: dict[str, Any] = Body(...),
    service: ProposalService = Depends(get_proposal_service),
) -> BarterProposal:
    # proposal_type 별 필드 검증은 엔진이 하므로 body 는 dict 그대로 넘긴다.
    return unwrap_proposal(service.create_proposal(body))


@router.get("", response_model=ProposalListing, summary="유저의 보낸/받은 제안 조회")
async def list_proposals(
    user_id: str = Query(..., description="유저 ID"),
    service: ProposalService = Depends(get_proposal_service),
) -> ProposalListing:
    return service.list_for_user(user_id)


@router.get("/{proposal_id}", response_model=BarterProposal, summary="제안 조회")
async def get_proposal(
    proposal_id: str,
    service: ProposalService = Depends(get_proposal_service),
) -> BarterProposal:
    proposal = service.get_proposal(proposal_id)
    if proposal is None:
        raise HTTPException(status_code=404, detail="proposal not found")
    return proposal


@router.post(
    "/{proposal_id}/accept", response_model=BarterProposal, summary="제안 수락"
)
async def accept_proposal(
    proposal_id: str,
    body: AcceptProposalRequest | None = None,
    actor_id: str | None = Query(None, description="수락하는 유저 ID (받는 사람)"),
    service: ProposalService = Depends(get_proposal_service),
) -> BarterProposal:
    meeting = body.to_meeting() if body is not None else None
    return unwrap_proposal(
        service.accept(proposal_id, meeting=meeting, actor_id=actor_id)
    )


@router.post(
    "/{proposal_id}/decline", response_model=BarterProposal, summary="제안 거절"
)
async def decline_proposal(
    proposal_id: str,
    actor_id: str | None = Query(None, description="거절하는 유저 ID (받는 사람)"),
    service: ProposalService = Depends(get_proposal_service),
) -> BarterProposal:
    return unwrap_proposal(service.decline(proposal_id, actor_id=actor_id))


@router.post(
    "/{proposal_id}/cancel", response_model=BarterProposal, summary="제안 취소"
)
async def cancel_proposal(
    proposal_id: str,
    actor_id: str | None = Query(None, description="취소하는 유저 ID (보낸 사람)"),
    service: ProposalService = Depends(get_proposal_service),
) -> BarterProposal:
    return unwrap_proposal(service.cancel(proposal_id, actor_id=actor_id))


@router.post(
    "/{proposal_id}/complete", response_model=BarterProposal, summary="거래 완료 처리"
)
async def complete_proposal(
    proposal_id: str,
    actor_id: str | None = Query(None, description="완료를 확정하는 참여자 ID"),
    service: ProposalService = Depends(get_proposal_service),
) -> BarterProposal:
    return unwrap_proposal(service.complete(proposal_id, actor_id=actor_id))
