from __future__ import annotations

from typing import Protocol

from common.models.user import User
from ..models.credit import CreditTransaction
from ..models.message import Message
from ..models.proposal import BarterProposal
from ..models.skill import SkillOffer


class UserRepositoryInterface(Protocol):
    """UserRepository가 따라야 할 최소한의 계약.

    Service 레이어는 이 인터페이스에만 의존하고, 구체 구현(Mongo 등)은 몰라도 된다.
    """

    def find_by_id(self, user_id: str) -> User | None:  # pragma: no cover - Protocol
        ...

    def find_by_email(self, email: str) -> User | None:  # pragma: no cover - Protocol
        ...

    def list_all(self) -> list[User]:  # pragma: no cover - Protocol
        ...

    def upsert(self, user: User) -> User:  # pragma: no cover - Protocol
        """user_id 가 같은 레코드를 통째로 교체한다. 없으면 새로 저장한다."""
        ...


class ProposalRepositoryInterface(Protocol):
    """ProposalRepository가 따라야 할 최소한의 계약.

    - 제안은 삭제하지 않는다. 상태 변경은 save 로 레코드 전체를 교체한다.
    - list_* 는 생성 순(오래된 것 먼저)으로 반환한다.
    """

    def insert(
        self, proposal: BarterProposal
    ) -> BarterProposal:  # pragma: no cover - Protocol
        ...

    def save(
        self, proposal: BarterProposal
    ) -> BarterProposal:  # pragma: no cover - Protocol
        ...

    def find_by_id(
        self, proposal_id: str
    ) -> BarterProposal | None:  # pragma: no cover - Protocol
        ...

    def list_all(self) -> list[BarterProposal]:  # pragma: no cover - Protocol
        ...

    def list_sent(
        self, user_id: str
    ) -> list[BarterProposal]:  # pragma: no cover - Protocol
        ...

    def list_received(
        self, user_id: str
    ) -> list[BarterProposal]:  # pragma: no cover - Protocol
        ...


class CreditTransactionRepositoryInterface(Protocol):
    """크레딧 트랜잭션 로그 저장소. append-only 이며 최신순으로 조회한다."""

    def create(
        self, tx: CreditTransaction
    ) -> CreditTransaction:  # pragma: no cover - Protocol
        ...

    def list_all(self) -> list[CreditTransaction]:  # pragma: no cover - Protocol
        ...

    def list_by_user(
        self, user_id: str
    ) -> list[CreditTransaction]:  # pragma: no cover - Protocol
        """from_user_id 또는 to_user_id 가 user_id 인 트랜잭션."""
        ...


class SkillOfferRepositoryInterface(Protocol):
    def insert(self, offer: SkillOffer) -> SkillOffer:  # pragma: no cover - Protocol
        ...

    def find_by_id(
        self, skill_id: str
    ) -> SkillOffer | None:  # pragma: no cover - Protocol
        ...

    def list_all(self) -> list[SkillOffer]:  # pragma: no cover - Protocol
        ...


class MessageRepositoryInterface(Protocol):
    """메시지 저장소. list_* 는 보낸 순(오래된 것 먼저)으로 반환한다."""

    def insert(self, message: Message) -> Message:  # pragma: no cover - Protocol
        ...

    def list_all(self) -> list[Message]:  # pragma: no cover - Protocol
        ...

    def list_for_user(
        self, user_id: str
    ) -> list[Message]:  # pragma: no cover - Protocol
        """sender_id 또는 receiver_id 가 user_id 인 메시지."""
        ...

    def list_by_conversation(
        self, conversation_id: str
    ) -> list[Message]:  # pragma: no cover - Protocol
        ...

    def mark_read(
        self, conversation_id: str, receiver_id: str
    ) -> int:  # pragma: no cover - Protocol
        """receiver_id 가 받은 안 읽은 메시지를 읽음 처리하고 바뀐 개수를 돌려준다."""
        ...

    def count_unread(self, receiver_id: str) -> int:  # pragma: no cover - Protocol
        ...
