from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from ..errors import unwrap_proposal
from ...models.trade import Trade, TradeListing, TradeStats, proposal_id_from_trade_id
from ...services.trade_service import TradeService, get_trade_service

router = APIRouter()


@router.get("", response_model=TradeListing, summary="유저의 진행중/완료 거래 조회")
async def list_trades(
    user_id: str = Query(..., description="유저 ID"),
    service: TradeService = Depends(get_trade_service),
) -> TradeListing:
    return service.list_for_user(user_id)


@router.get("/stats", response_model=TradeStats, summary="유저 거래 통계")
async def get_trade_stats(
    user_id: str = Query(..., description="유저 ID"),
    service: TradeService = Depends(get_trade_service),
) -> TradeStats:
    return service.stats_for(user_id)


@router.get("/{trade_id}", response_model=Trade, summary="거래 조회")
async def get_trade(
    trade_id: str,
    service: TradeService = Depends(get_trade_service),
) -> Trade:
    trade = service.get_trade(trade_id)
    if trade is None:
        raise HTTPException(status_code=404, detail="trade not found")
    return trade


@router.post("/{trade_id}/complete", response_model=Trade, summary="거래 완료 확정")
async def complete_trade(
    trade_id: str,
    user_id: str = Query(..., description="완료를 확정하는 참여자 ID"),
    service: TradeService = Depends(get_trade_service),
) -> Trade:
    proposal_id = proposal_id_from_trade_id(trade_id)
    if proposal_id is None:
        raise HTTPException(status_code=404, detail="trade not found")
    proposal = unwrap_proposal(service.complete_trade(proposal_id, user_id))
    return service.to_trade(proposal)
