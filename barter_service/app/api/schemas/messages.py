from __future__ import annotations

from pydantic import BaseModel, Field


class SendMessageRequest(BaseModel):
    sender_id: str
    receiver_id: str
    content: str = Field(min_length=1, max_length=4000)
    related_proposal_id: str | None = None


class MarkReadResponse(BaseModel):
    conversation_id: str
    marked: int


class UnreadCountResponse(BaseModel):
    user_id: str
    unread_count: int
