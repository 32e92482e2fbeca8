from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..schemas.skills import (
    CreateSkillOfferRequest,
    ListSkillOffersResponse,
    SkillOfferResponse,
)
from ...services.skill_service import SkillOfferInput, SkillService, get_skill_service

router = APIRouter()


@router.post(
    "",
    response_model=SkillOfferResponse,
    status_code=status.HTTP_201_CREATED,
    summary="스킬 오퍼 등록",
)
async def create_skill_offer(
    body: CreateSkillOfferRequest,
    service: SkillService = Depends(get_skill_service),
) -> SkillOfferResponse:
    offer = service.add_offer(SkillOfferInput(**body.model_dump()))
    if offer is None:
        raise HTTPException(status_code=404, detail="user not found")
    return SkillOfferResponse.from_domain(offer)


@router.get("", response_model=ListSkillOffersResponse, summary="스킬 오퍼 목록 조회")
async def list_skill_offers(
    user_id: str | None = Query(None, description="이 유저의 오퍼만 조회"),
    service: SkillService = Depends(get_skill_service),
) -> ListSkillOffersResponse:
    offers = service.list_offers(user_id=user_id)
    return ListSkillOffersResponse(
        total=len(offers),
        items=[SkillOfferResponse.from_domain(o) for o in offers],
    )


@router.get("/{skill_id}", response_model=SkillOfferResponse, summary="스킬 오퍼 조회")
async def get_skill_offer(
    skill_id: str,
    service: SkillService = Depends(get_skill_service),
) -> SkillOfferResponse:
    offer = service.get_offer(skill_id)
    if offer is None:
        raise HTTPException(status_code=404, detail="skill offer not found")
    return SkillOfferResponse.from_domain(offer)
