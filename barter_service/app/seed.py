"""데모 데이터 시드.

economy.seed_demo_data 가 켜져 있으면 앱 시작 시 한 번 실행된다.
컬렉션별로 비어 있을 때만 넣으므로 여러 번 실행해도 기존 데이터를 덮어쓰지 않는다.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from pymongo.database import Database

from common.models.user import User

from .models.message import Message, conversation_id_for
from .models.proposal import (
    BarterProposal,
    CreditsForSkillProposal,
    ProposalStatus,
    SkillForSkillProposal,
)
from .models.skill import SkillCategory, SkillOffer
from .repositories.interfaces import (
    MessageRepositoryInterface,
    ProposalRepositoryInterface,
    SkillOfferRepositoryInterface,
    UserRepositoryInterface,
)
from .repositories.message_repository import MessageRepository
from .repositories.proposal_repository import ProposalRepository
from .repositories.skill_repository import SkillOfferRepository
from .repositories.user_repository import UserRepository


logger = logging.getLogger(__name__)


def _utc(
    year: int, month: int, day: int, hour: int = 0, minute: int = 0
) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


SARAH_AVATAR = "/friendly-woman-smiling.png"
MIKE_AVATAR = "/friendly-man-tools.png"


def demo_users() -> list[User]:
    return [
        User(
            user_id="1",
            name="Sarah Johnson",
            email="sarah@example.com",
            avatar=SARAH_AVATAR,
            bio="Love teaching cooking and learning new skills!",
            location="Downtown",
            skills_offered=["Cooking", "Baking", "Meal Planning"],
            skills_wanted=["Guitar Lessons", "Home Repair", "Gardening"],
            credits=5,
            rating=4.8,
            completed_trades=12,
            joined_at=_utc(2024, 1, 15),
            updated_at=_utc(2024, 1, 15),
        ),
        User(
            user_id="2",
            name="Mike Chen",
            email="mike@example.com",
            avatar=MIKE_AVATAR,
            bio="Handyman who loves fixing things and teaching others!",
            location="Midtown",
            skills_offered=["Home Repair", "Plumbing", "Electrical Work"],
            skills_wanted=["Cooking Classes", "Language Tutoring", "Photography"],
            credits=8,
            rating=4.9,
            completed_trades=18,
            joined_at=_utc(2024, 2, 1),
            updated_at=_utc(2024, 2, 1),
        ),
    ]


def demo_skill_offers() -> list[SkillOffer]:
    return [
        SkillOffer(
            skill_id="1",
            user_id="1",
            title="Italian Cooking Classes",
            description=(
                "Learn to make authentic Italian pasta, risotto, and traditional "
                "sauces. Perfect for beginners!"
            ),
            category=SkillCategory.COOKING,
            tags=["pasta", "italian", "beginner-friendly"],
            location="Downtown",
            availability="Weekends",
            created_at=_utc(2024, 1, 20),
        ),
        SkillOffer(
            skill_id="2",
            user_id="2",
            title="Basic Home Plumbing",
            description=(
                "Fix leaky faucets, unclog drains, and basic pipe repairs. "
                "Bring your own tools!"
            ),
            category=SkillCategory.REPAIRS,
            tags=["plumbing", "home-repair", "hands-on"],
            location="Midtown",
            availability="Evenings & Weekends",
            created_at=_utc(2024, 1, 18),
        ),
        SkillOffer(
            skill_id="3",
            user_id="1",
            title="Beginner Guitar Lessons",
            description=(
                "Learn basic chords, strumming patterns, and play your first songs. "
                "Guitar provided."
            ),
            category=SkillCategory.MUSIC,
            tags=["guitar", "beginner", "acoustic"],
            location="Downtown",
            availability="Flexible",
            created_at=_utc(2024, 1, 15),
        ),
        SkillOffer(
            skill_id="4",
            user_id="2",
            title="Computer Troubleshooting",
            description=(
                "Help with slow computers, virus removal, software installation, "
                "and basic tech support."
            ),
            category=SkillCategory.TECHNOLOGY,
            tags=["computer", "troubleshooting", "tech-support"],
            location="Midtown",
            availability="Weekdays after 6pm",
            created_at=_utc(2024, 1, 22),
        ),
    ]


def demo_proposals() -> list[BarterProposal]:
    return [
        CreditsForSkillProposal(
            proposal_id="2",
            from_user_id="1",
            from_user_name="Sarah Johnson",
            from_user_avatar=SARAH_AVATAR,
            to_user_id="2",
            to_user_name="Mike Chen",
            to_user_avatar=MIKE_AVATAR,
            offered_credits=2,
            requested_skill_id="4",
            requested_skill_title="Computer Troubleshooting",
            message=(
                "Hey Mike! My laptop has been running really slow lately. I can offer "
                "2 credits for some tech support help. Would that work for you?"
            ),
            status=ProposalStatus.ACCEPTED,
            created_at=_utc(2024, 1, 22),
            responded_at=_utc(2024, 1, 22, 1),
            meeting_location="Coffee shop on Main St",
            meeting_time=_utc(2024, 1, 25, 14),
        ),
        SkillForSkillProposal(
            proposal_id="1",
            from_user_id="2",
            from_user_name="Mike Chen",
            from_user_avatar=MIKE_AVATAR,
            to_user_id="1",
            to_user_name="Sarah Johnson",
            to_user_avatar=SARAH_AVATAR,
            offered_skill_id="2",
            offered_skill_title="Basic Home Plumbing",
            requested_skill_id="1",
            requested_skill_title="Italian Cooking Classes",
            message=(
                "Hi Sarah! I saw your Italian cooking class offer. I can help with any "
                "plumbing issues you might have in exchange for learning to make "
                "authentic pasta. Let me know if you're interested!"
            ),
            created_at=_utc(2024, 1, 23),
        ),
    ]


DEMO_MESSAGE_CONTENTS: list[tuple[str, str, datetime, bool, str | None]] = [
    (
        "2",
        "Hi Sarah! I saw your Italian cooking class offer. I can help with any plumbing "
        "issues you might have in exchange for learning to make authentic pasta. "
        "Let me know if you're interested!",
        _utc(2024, 1, 23, 10, 30),
        True,
        "1",
    ),
    (
        "1",
        "Hi Mike! That sounds like a great trade. I actually do have a leaky faucet in "
        "my kitchen that's been bothering me. When would be a good time for you?",
        _utc(2024, 1, 23, 14, 15),
        True,
        "1",
    ),
    (
        "2",
        "Perfect! I'm free this weekend. How about Saturday afternoon? I can bring my "
        "tools and fix the faucet, then maybe you can show me how to make some pasta?",
        _utc(2024, 1, 23, 16, 45),
        False,
        None,
    ),
    (
        "1",
        "Hey Mike! My laptop has been running really slow lately. I can offer 2 credits "
        "for some tech support help. Would that work for you?",
        _utc(2024, 1, 22, 9, 20),
        True,
        "2",
    ),
    (
        "2",
        "2 credits sounds fair. I can take a look at it this week. Would Thursday "
        "evening work for you? We could meet at the coffee shop on Main St.",
        _utc(2024, 1, 22, 11, 30),
        True,
        "2",
    ),
]


def demo_messages() -> list[Message]:
    """Sarah(1) 와 Mike(2) 사이의 대화. Mike 가 보낸 마지막 메시지 하나만 안 읽음 상태다."""
    users = {user.user_id: user for user in demo_users()}
    messages = []
    for index, (sender_id, content, sent_at, is_read, proposal_id) in enumerate(
        DEMO_MESSAGE_CONTENTS, start=1
    ):
        sender = users[sender_id]
        receiver = users["1" if sender_id == "2" else "2"]
        messages.append(
            Message(
                message_id=str(index),
                conversation_id=conversation_id_for(sender.user_id, receiver.user_id),
                sender_id=sender.user_id,
                sender_name=sender.name,
                sender_avatar=sender.avatar,
                receiver_id=receiver.user_id,
                receiver_name=receiver.name,
                receiver_avatar=receiver.avatar,
                content=content,
                sent_at=sent_at,
                is_read=is_read,
                related_proposal_id=proposal_id,
            )
        )
    return messages


def seed_demo_data(
    user_repo: UserRepositoryInterface,
    skill_repo: SkillOfferRepositoryInterface,
    proposal_repo: ProposalRepositoryInterface,
    message_repo: MessageRepositoryInterface | None = None,
) -> dict[str, int]:
    """비어 있는 컬렉션에만 데모 데이터를 넣고, 컬렉션별로 넣은 개수를 반환한다.

    message_repo 를 넘긴 경우에만 메시지를 넣고 결과에 messages 키를 추가한다.
    """

    inserted = {"users": 0, "skill_offers": 0, "proposals": 0}

    if not user_repo.list_all():
        for user in demo_users():
            user_repo.upsert(user)
            inserted["users"] += 1

    if not skill_repo.list_all():
        for offer in demo_skill_offers():
            skill_repo.insert(offer)
            inserted["skill_offers"] += 1

    if not proposal_repo.list_all():
        for proposal in demo_proposals():
            proposal_repo.insert(proposal)
            inserted["proposals"] += 1

    if message_repo is not None:
        inserted["messages"] = 0
        if not message_repo.list_all():
            for message in demo_messages():
                message_repo.insert(message)
                inserted["messages"] += 1

    logger.info("demo data seeded (%s)", inserted)
    return inserted


def seed_database(db: Database) -> dict[str, int]:
    return seed_demo_data(
        user_repo=UserRepository(db),
        skill_repo=SkillOfferRepository(db),
        proposal_repo=ProposalRepository(db),
        message_repo=MessageRepository(db),
    )
