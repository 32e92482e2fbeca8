"""유저 간 메시지.

메시지는 저장만 하고 실시간으로 전달하지 않는다. 받는 쪽은 대화 목록과 안 읽은 개수를
조회해서 새 메시지를 확인한다.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import Depends
from pymongo.database import Database

from common.mongo.client import get_database
from common.types.datetime import utc_now

from ..models.errors import ErrorCode
from ..models.message import (
    Conversation,
    ConversationParticipant,
    Message,
    MessageResult,
    conversation_id_for,
)
from ..repositories.interfaces import MessageRepositoryInterface
from ..repositories.message_repository import MessageRepository
from .user_directory import UserDirectory, get_user_directory


logger = logging.getLogger(__name__)


class MessageService:
    def __init__(
        self,
        message_repo: MessageRepositoryInterface,
        directory: UserDirectory,
    ) -> None:
        self._message_repo = message_repo
        self._directory = directory

    def send_message(
        self,
        sender_id: str,
        receiver_id: str,
        content: str,
        related_proposal_id: str | None = None,
    ) -> MessageResult:
        """메시지를 저장한다. 이름과 아바타는 보내는 시점의 프로필에서 복사한다."""
        text = content.strip()
        if not text:
            return self._reject(ErrorCode.VALIDATION_ERROR, "Message is empty", sender_id)
        if sender_id == receiver_id:
            return self._reject(
                ErrorCode.VALIDATION_ERROR, "Cannot send a message to yourself", sender_id
            )

        sender = self._directory.get(sender_id)
        receiver = self._directory.get(receiver_id)
        if sender is None or receiver is None:
            return self._reject(ErrorCode.NOT_FOUND, "User not found", sender_id)

        sent = self._message_repo.insert(
            Message(
                message_id=str(uuid.uuid4()),
                conversation_id=conversation_id_for(sender_id, receiver_id),
                sender_id=sender.user_id,
                sender_name=sender.name,
                sender_avatar=sender.avatar,
                receiver_id=receiver.user_id,
                receiver_name=receiver.name,
                receiver_avatar=receiver.avatar,
                content=text,
                sent_at=utc_now(),
                related_proposal_id=related_proposal_id,
            )
        )
        logger.info(
            "message sent (conversation_id=%s, to=%s)",
            sent.conversation_id,
            receiver_id,
            extra={"user_id": sender_id, "proposal_id": related_proposal_id},
        )
        return MessageResult.ok(sent)

    def conversations_for(self, user_id: str) -> list[Conversation]:
        """유저가 참여한 대화 요약. 마지막 활동이 최신인 대화가 먼저 온다."""
        me = self._directory.get(user_id)
        conversations: dict[str, Conversation] = {}

        for message in self._message_repo.list_for_user(user_id):
            conversation = conversations.get(message.conversation_id)
            if conversation is None:
                if message.sender_id == user_id:
                    other = ConversationParticipant(
                        id=message.receiver_id,
                        name=message.receiver_name,
                        avatar=message.receiver_avatar,
                    )
                else:
                    other = ConversationParticipant(
                        id=message.sender_id,
                        name=message.sender_name,
                        avatar=message.sender_avatar,
                    )
                conversation = Conversation(
                    conversation_id=message.conversation_id,
                    participants=[
                        ConversationParticipant(
                            id=user_id,
                            name=me.name if me is not None else "",
                            avatar=me.avatar if me is not None else None,
                        ),
                        other,
                    ],
                    last_activity=message.sent_at,
                    related_proposal_id=message.related_proposal_id,
                )
                conversations[message.conversation_id] = conversation

            # 보낸 순으로 오므로 같은 시각이면 나중에 저장된 메시지가 마지막이 된다.
            last = conversation.last_message
            if last is None or message.sent_at >= last.sent_at:
                conversation.last_message = message
                conversation.last_activity = message.sent_at

            if message.receiver_id == user_id and not message.is_read:
                conversation.unread_count += 1

        return sorted(
            conversations.values(), key=lambda c: c.last_activity, reverse=True
        )

    def messages_for_conversation(self, conversation_id: str) -> list[Message]:
        """대화의 메시지를 보낸 순으로 반환한다."""
        return self._message_repo.list_by_conversation(conversation_id)

    def mark_as_read(self, conversation_id: str, user_id: str) -> int:
        """user_id 가 받은 메시지만 읽음 처리한다. 바뀐 메시지 수를 반환한다."""
        marked = self._message_repo.mark_read(conversation_id, user_id)
        if marked:
            logger.info(
                "messages marked as read (conversation_id=%s, count=%d)",
                conversation_id,
                marked,
                extra={"user_id": user_id},
            )
        return marked

    def unread_count(self, user_id: str) -> int:
        return self._message_repo.count_unread(user_id)

    @staticmethod
    def _reject(error: ErrorCode, message: str, user_id: str) -> MessageResult:
        logger.warning(
            "message rejected: %s (user_id=%s)",
            message,
            user_id,
            extra={"error_code": str(error)},
        )
        return MessageResult.fail(error, message)


def get_message_repository(
    db: Database = Depends(get_database),
) -> MessageRepositoryInterface:
    """FastAPI DI용 MessageRepository 팩토리."""

    return MessageRepository(db)


def get_message_service(
    message_repo: MessageRepositoryInterface = Depends(get_message_repository),
    directory: UserDirectory = Depends(get_user_directory),
) -> MessageService:
    """FastAPI DI용 MessageService 팩토리."""

    return MessageService(message_repo=message_repo, directory=directory)
