"""거래(Trade) 뷰 모델.

Trade 는 저장되지 않는다. accepted/completed 상태의 제안을 읽을 때마다
TradeService.to_trade 가 새로 만들어 내는 읽기 전용 투영이며, id 는 항상
"trade_<proposal_id>" 다.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field

from common.types.datetime import UtcDateTime

from .skill import SkillCategory


TRADE_ID_PREFIX = "trade_"


def trade_id_for(proposal_id: str) -> str:
    return f"{TRADE_ID_PREFIX}{proposal_id}"


def proposal_id_from_trade_id(trade_id: str) -> str | None:
    if not trade_id.startswith(TRADE_ID_PREFIX):
        return None
    return trade_id[len(TRADE_ID_PREFIX) :] or None


class TradeStatus(StrEnum):
    ACTIVE = "active"
    COMPLETED = "completed"


class TradeStage(StrEnum):
    PLANNING = "planning"
    IN_PROGRESS = "in-progress"
    REVIEW = "review"
    COMPLETED = "completed"


class SkillLevel(StrEnum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class TradeParticipant(BaseModel):
    id: str
    name: str
    avatar: str | None = None


class TradeParticipants(BaseModel):
    offerer: TradeParticipant
    receiver: TradeParticipant


class TradeAsset(BaseModel):
    """거래의 한쪽에서 오가는 것. 스킬이거나 크레딧이다."""

    type: Literal["skill", "credits"]
    skill_id: str | None = None
    skill_title: str | None = None
    skill_category: SkillCategory | None = None
    credits: int | None = None


class TradeDetails(BaseModel):
    offered: TradeAsset
    requested: TradeAsset


class TradeMilestone(BaseModel):
    id: str
    title: str
    description: str
    is_completed: bool
    completed_at: UtcDateTime | None = None
    skill_related: bool = False


class SkillsDelivered(BaseModel):
    offerer_skill_delivered: bool
    receiver_skill_delivered: bool


class TradeProgress(BaseModel):
    stage: TradeStage
    milestones: list[TradeMilestone]
    skills_delivered: SkillsDelivered


class TradeMeetingDetails(BaseModel):
    location: str | None = None
    time: UtcDateTime | None = None
    notes: str | None = None


class SkillExchangeDetails(BaseModel):
    session_duration: int = 60  # 분
    skill_level: SkillLevel = SkillLevel.BEGINNER
    materials_needed: list[str] = Field(default_factory=list)
    prerequisites: list[str] = Field(default_factory=list)


class Trade(BaseModel):
    id: str
    proposal_id: str
    proposal_type: str
    participants: TradeParticipants
    trade_details: TradeDetails
    status: TradeStatus
    progress: TradeProgress
    meeting_details: TradeMeetingDetails | None = None
    skill_exchange_details: SkillExchangeDetails | None = None
    started_at: UtcDateTime
    completed_at: UtcDateTime | None = None


class TradeListing(BaseModel):
    active: list[Trade] = Field(default_factory=list)
    completed: list[Trade] = Field(default_factory=list)


class TradeStats(BaseModel):
    """유저 한 명의 거래 집계."""

    total_trades: int = 0
    active_trades: int = 0
    completed_trades: int = 0
    success_rate: int = 0  # 0-100 반올림 퍼센트
    total_credits_earned: int = 0
    total_credits_spent: int = 0
    skills_learned: int = 0
    skills_taught: int = 0
    favorite_category: SkillCategory | None = None
