from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from ..errors import unwrap_message
from ..schemas.messages import MarkReadResponse, SendMessageRequest, UnreadCountResponse
from ...models.message import Conversation, Message
from ...services.message_service import MessageService, get_message_service

router = APIRouter()


@router.post(
    "",
    response_model=Message,
    status_code=status.HTTP_201_CREATED,
    summary="메시지 보내기",
)
async def send_message(
    body: SendMessageRequest,
    service: MessageService = Depends(get_message_service),
) -> Message:
    result = service.send_message(
        body.sender_id,
        body.receiver_id,
        body.content,
        related_proposal_id=body.related_proposal_id,
    )
    return unwrap_message(result)


@router.get("/conversations", response_model=list[Conversation], summary="대화 목록 조회")
async def list_conversations(
    user_id: str = Query(..., description="유저 ID"),
    service: MessageService = Depends(get_message_service),
) -> list[Conversation]:
    return service.conversations_for(user_id)


@router.get(
    "/conversations/{conversation_id}",
    response_model=list[Message],
    summary="대화 메시지 조회",
)
async def list_conversation_messages(
    conversation_id: str,
    service: MessageService = Depends(get_message_service),
) -> list[Message]:
    return service.messages_for_conversation(conversation_id)


@router.post(
    "/conversations/{conversation_id}/read",
    response_model=MarkReadResponse,
    summary="받은 메시지 읽음 처리",
)
async def mark_conversation_read(
    conversation_id: str,
    user_id: str = Query(..., description="메시지를 읽은 유저 ID"),
    service: MessageService = Depends(get_message_service),
) -> MarkReadResponse:
    marked = service.mark_as_read(conversation_id, user_id)
    return MarkReadResponse(conversation_id=conversation_id, marked=marked)


@router.get("/unread-count", response_model=UnreadCountResponse, summary="안 읽은 메시지 수")
async def get_unread_count(
    user_id: str = Query(..., description="유저 ID"),
    service: MessageService = Depends(get_message_service),
) -> UnreadCountResponse:
    return UnreadCountResponse(user_id=user_id, unread_count=service.unread_count(user_id))
