from __future__ import annotations

from datetime import datetime, timedelta, timezone

from barter_service.app.models.errors import ErrorCode
from barter_service.app.models.proposal import (
    CreditsForSkillProposal,
    ProposalStatus,
    SkillForCreditsProposal,
    SkillForSkillProposal,
)
from barter_service.app.models.skill import SkillCategory
from barter_service.app.models.trade import TradeStage, TradeStatus
from barter_service.app.services.trade_service import generate_milestones
from barter_service.tests.fakes import build_engine, build_skill, build_user


BASE = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def _at(hours: int) -> datetime:
    return BASE + timedelta(hours=hours)


def _build_fixture():
    return build_engine(
        users=[
            build_user("u1", credits=10, name="Sarah"),
            build_user("u2", credits=10, name="Mike"),
            build_user("u3", credits=10, name="Ana"),
        ],
        skills=[
            build_skill("s-cook", "u1", "Italian Cooking", SkillCategory.COOKING),
            build_skill("s-bake", "u1", "Sourdough Baking", SkillCategory.COOKING),
            build_skill("s-plumb", "u2", "Plumbing", SkillCategory.REPAIRS),
            build_skill("s-guitar", "u3", "Guitar", SkillCategory.MUSIC),
        ],
    )


def _s4s(proposal_id: str, status: ProposalStatus, **kwargs) -> SkillForSkillProposal:
    fields = dict(
        proposal_id=proposal_id,
        from_user_id="u1",
        from_user_name="Sarah",
        to_user_id="u2",
        to_user_name="Mike",
        offered_skill_id="s-cook",
        offered_skill_title="Italian Cooking",
        requested_skill_id="s-plumb",
        requested_skill_title="Plumbing",
        status=status,
        created_at=_at(0),
    )
    fields.update(kwargs)
    return SkillForSkillProposal(**fields)


def _c4s(proposal_id: str, status: ProposalStatus, **kwargs) -> CreditsForSkillProposal:
    fields = dict(
        proposal_id=proposal_id,
        from_user_id="u1",
        from_user_name="Sarah",
        to_user_id="u3",
        to_user_name="Ana",
        offered_credits=2,
        requested_skill_id="s-guitar",
        requested_skill_title="Guitar",
        status=status,
        created_at=_at(0),
    )
    fields.update(kwargs)
    return CreditsForSkillProposal(**fields)


def _s4c(proposal_id: str, status: ProposalStatus, **kwargs) -> SkillForCreditsProposal:
    fields = dict(
        proposal_id=proposal_id,
        from_user_id="u1",
        from_user_name="Sarah",
        to_user_id="u2",
        to_user_name="Mike",
        offered_skill_id="s-bake",
        offered_skill_title="Sourdough Baking",
        requested_credits=3,
        status=status,
        created_at=_at(0),
    )
    fields.update(kwargs)
    return SkillForCreditsProposal(**fields)


# -------- projection --------


def test_to_trade_maps_participants_details_and_ids() -> None:
    engine = _build_fixture()
    proposal = _c4s(
        "p1",
        ProposalStatus.ACCEPTED,
        responded_at=_at(2),
        meeting_location="Music store",
    )

    trade = engine.trades.to_trade(proposal)

    assert trade.id == "trade_p1"
    assert trade.proposal_id == "p1"
    assert trade.status == TradeStatus.ACTIVE
    assert trade.participants.offerer.id == "u1"
    assert trade.participants.receiver.name == "Ana"
    assert trade.trade_details.offered.type == "credits"
    assert trade.trade_details.offered.credits == 2
    assert trade.trade_details.requested.type == "skill"
    assert trade.trade_details.requested.skill_id == "s-guitar"
    assert trade.trade_details.requested.skill_category == SkillCategory.MUSIC
    assert trade.started_at == _at(2)
    assert trade.completed_at is None
    assert trade.progress.stage == TradeStage.PLANNING
    assert trade.meeting_details is not None
    assert trade.meeting_details.location == "Music store"
    assert trade.skill_exchange_details is None


def test_started_at_falls_back_to_created_at() -> None:
    engine = _build_fixture()

    trade = engine.trades.to_trade(_s4s("p1", ProposalStatus.ACCEPTED))

    assert trade.started_at == _at(0)
    assert trade.meeting_details is None


def test_skill_for_skill_trade_carries_exchange_details() -> None:
    engine = _build_fixture()

    trade = engine.trades.to_trade(_s4s("p1", ProposalStatus.ACCEPTED))

    details = trade.skill_exchange_details
    assert details is not None
    assert details.session_duration == 60
    assert details.skill_level == "beginner"
    assert details.materials_needed == []


def test_to_trade_is_pure() -> None:
    engine = _build_fixture()
    proposal = _s4c(
        "p1",
        ProposalStatus.COMPLETED,
        responded_at=_at(1),
        completed_at=_at(5),
    )

    assert engine.trades.to_trade(proposal) == engine.trades.to_trade(proposal)
    assert generate_milestones(proposal) == generate_milestones(proposal)


def test_skills_delivered_depends_on_type_when_completed() -> None:
    engine = _build_fixture()
    done = dict(responded_at=_at(1), completed_at=_at(2))

    s4s = engine.trades.to_trade(_s4s("a", ProposalStatus.COMPLETED, **done))
    c4s = engine.trades.to_trade(_c4s("b", ProposalStatus.COMPLETED, **done))
    s4c = engine.trades.to_trade(_s4c("c", ProposalStatus.COMPLETED, **done))
    active = engine.trades.to_trade(_s4s("d", ProposalStatus.ACCEPTED))

    assert (s4s.progress.skills_delivered.offerer_skill_delivered,
            s4s.progress.skills_delivered.receiver_skill_delivered) == (True, True)
    assert (c4s.progress.skills_delivered.offerer_skill_delivered,
            c4s.progress.skills_delivered.receiver_skill_delivered) == (False, True)
    assert (s4c.progress.skills_delivered.offerer_skill_delivered,
            s4c.progress.skills_delivered.receiver_skill_delivered) == (True, False)
    assert (active.progress.skills_delivered.offerer_skill_delivered,
            active.progress.skills_delivered.receiver_skill_delivered) == (False, False)
    assert s4s.progress.stage == TradeStage.COMPLETED


# -------- milestones --------


def test_skill_for_skill_milestones() -> None:
    milestones = generate_milestones(_s4s("p1", ProposalStatus.ACCEPTED, responded_at=_at(1)))

    assert [m.id for m in milestones] == [
        "agreement",
        "meeting_scheduled",
        "skill_1_delivered",
        "skill_2_delivered",
        "trade_completed",
    ]
    done = {m.id: m.is_completed for m in milestones}
    assert done == {
        "agreement": True,
        "meeting_scheduled": False,
        "skill_1_delivered": False,
        "skill_2_delivered": False,
        "trade_completed": False,
    }
    assert milestones[0].completed_at == _at(1)
    assert milestones[2].completed_at is None


def test_credits_for_skill_milestones_mark_credits_on_accept() -> None:
    milestones = generate_milestones(
        _c4s(
            "p1",
            ProposalStatus.ACCEPTED,
            responded_at=_at(1),
            meeting_time=_at(30),
        )
    )

    assert [m.id for m in milestones] == [
        "agreement",
        "meeting_scheduled",
        "credits_transferred",
        "skill_delivered",
        "delivery_confirmed",
        "trade_completed",
    ]
    done = {m.id: m.is_completed for m in milestones}
    assert done["agreement"] is True
    assert done["meeting_scheduled"] is True
    assert done["credits_transferred"] is True
    assert done["skill_delivered"] is False
    assert done["trade_completed"] is False


def test_skill_for_credits_milestones_mark_credits_on_completion() -> None:
    accepted = generate_milestones(_s4c("p1", ProposalStatus.ACCEPTED, responded_at=_at(1)))
    completed = generate_milestones(
        _s4c("p1", ProposalStatus.COMPLETED, responded_at=_at(1), completed_at=_at(9))
    )

    assert [m.id for m in accepted] == [
        "agreement",
        "meeting_scheduled",
        "skill_delivered",
        "credits_transferred",
        "delivery_confirmed",
        "trade_completed",
    ]
    assert {m.id: m.is_completed for m in accepted}["credits_transferred"] is False
    by_id = {m.id: m for m in completed}
    assert by_id["credits_transferred"].is_completed is True
    assert by_id["credits_transferred"].completed_at == _at(9)
    assert by_id["trade_completed"].completed_at == _at(9)


# -------- listing --------


def test_list_for_user_keeps_only_accepted_and_completed() -> None:
    engine = _build_fixture()
    repo = engine.proposal_repo
    repo.insert(_s4s("pending", ProposalStatus.PENDING))
    repo.insert(_s4s("declined", ProposalStatus.DECLINED, responded_at=_at(1)))
    repo.insert(_s4s("cancelled", ProposalStatus.CANCELLED, responded_at=_at(1)))
    repo.insert(_s4s("accepted", ProposalStatus.ACCEPTED, responded_at=_at(1)))
    repo.insert(
        _s4s("completed", ProposalStatus.COMPLETED, responded_at=_at(1), completed_at=_at(3))
    )

    listing = engine.trades.list_for_user("u1")

    assert [t.proposal_id for t in listing.active] == ["accepted"]
    assert [t.proposal_id for t in listing.completed] == ["completed"]
    assert engine.trades.list_for_user("u2") == listing


def test_list_for_user_sorts_newest_first() -> None:
    engine = _build_fixture()
    repo = engine.proposal_repo
    repo.insert(_s4s("a-old", ProposalStatus.ACCEPTED, responded_at=_at(1)))
    repo.insert(_c4s("a-new", ProposalStatus.ACCEPTED, responded_at=_at(5)))
    repo.insert(_s4c("a-mid", ProposalStatus.ACCEPTED, created_at=_at(3)))
    repo.insert(
        _s4s("c-old", ProposalStatus.COMPLETED, responded_at=_at(1), completed_at=_at(2))
    )
    repo.insert(_s4s("c-none", ProposalStatus.COMPLETED, responded_at=_at(1)))
    repo.insert(
        _c4s("c-new", ProposalStatus.COMPLETED, responded_at=_at(1), completed_at=_at(8))
    )

    listing = engine.trades.list_for_user("u1")

    assert [t.proposal_id for t in listing.active] == ["a-new", "a-mid", "a-old"]
    assert [t.proposal_id for t in listing.completed] == ["c-new", "c-old", "c-none"]


def test_get_trade() -> None:
    engine = _build_fixture()
    engine.proposal_repo.insert(_s4s("p1", ProposalStatus.ACCEPTED))
    engine.proposal_repo.insert(_s4s("p2", ProposalStatus.PENDING))

    assert engine.trades.get_trade("trade_p1").proposal_id == "p1"
    assert engine.trades.get_trade("trade_p2") is None
    assert engine.trades.get_trade("trade_missing") is None
    assert engine.trades.get_trade("p1") is None


# -------- stats --------


def test_stats_for_user_without_trades_is_zero() -> None:
    engine = _build_fixture()

    stats = engine.trades.stats_for("u1")

    assert stats.total_trades == 0
    assert stats.success_rate == 0
    assert stats.total_credits_earned == 0
    assert stats.favorite_category is None


def test_stats_attribute_by_role_and_type() -> None:
    engine = _build_fixture()
    repo = engine.proposal_repo
    done = dict(responded_at=_at(1), completed_at=_at(2))
    # u1 -> u2 skill-for-skill: 양쪽 모두 taught+1, learned+1
    repo.insert(_s4s("s4s", ProposalStatus.COMPLETED, **done))
    # u1 -> u3 credits-for-skill: u1 learned/spent 2, u3 taught/earned 2
    repo.insert(_c4s("c4s", ProposalStatus.COMPLETED, **done))
    # u1 -> u2 skill-for-credits: u1 taught/earned 3, u2 learned/spent 3
    repo.insert(_s4c("s4c", ProposalStatus.COMPLETED, **done))
    repo.insert(_s4s("active", ProposalStatus.ACCEPTED, responded_at=_at(1)))

    u1 = engine.trades.stats_for("u1")
    assert (u1.skills_taught, u1.skills_learned) == (2, 2)
    assert (u1.total_credits_earned, u1.total_credits_spent) == (3, 2)
    assert (u1.active_trades, u1.completed_trades, u1.total_trades) == (1, 3, 4)
    assert u1.success_rate == 75
    assert u1.favorite_category == SkillCategory.COOKING

    u2 = engine.trades.stats_for("u2")
    assert (u2.skills_taught, u2.skills_learned) == (1, 2)
    assert (u2.total_credits_earned, u2.total_credits_spent) == (0, 3)
    assert u2.favorite_category == SkillCategory.REPAIRS

    u3 = engine.trades.stats_for("u3")
    assert (u3.skills_taught, u3.skills_learned) == (1, 0)
    assert (u3.total_credits_earned, u3.total_credits_spent) == (2, 0)
    assert u3.success_rate == 100
    assert u3.favorite_category == SkillCategory.MUSIC


def test_stats_add_bonus_transactions_to_earned() -> None:
    engine = _build_fixture()
    engine.credits.award_bonus("u1", 4, "Welcome")
    engine.credits.transfer("u2", "u1", 5, "Not a bonus")

    stats = engine.trades.stats_for("u1")

    assert stats.total_credits_earned == 4


def test_stats_are_consistent_with_listing() -> None:
    engine = _build_fixture()
    repo = engine.proposal_repo
    repo.insert(_s4s("a", ProposalStatus.ACCEPTED))
    repo.insert(_c4s("b", ProposalStatus.ACCEPTED))
    repo.insert(_s4c("c", ProposalStatus.COMPLETED, completed_at=_at(2)))

    listing = engine.trades.list_for_user("u1")
    stats = engine.trades.stats_for("u1")

    assert stats.active_trades == len(listing.active) == 2
    assert stats.completed_trades == len(listing.completed) == 1
    assert stats.success_rate == round(100 * 1 / 3)


def test_stats_after_real_lifecycle_include_completion_bonus() -> None:
    engine = _build_fixture()
    created = engine.proposals.create_proposal(
        _c4s("ignored", ProposalStatus.PENDING).model_dump(mode="json")
    )
    proposal_id = created.proposal.proposal_id
    engine.proposals.accept(proposal_id)
    engine.proposals.complete(proposal_id)

    u3 = engine.trades.stats_for("u3")

    # 2 크레딧 대가 + 완료 보너스 1
    assert u3.total_credits_earned == 3
    assert u3.completed_trades == 1


# -------- complete_trade --------


def test_complete_trade_requires_participant() -> None:
    engine = _build_fixture()
    engine.proposal_repo.insert(_s4s("p1", ProposalStatus.ACCEPTED, responded_at=_at(1)))

    denied = engine.trades.complete_trade("p1", "u3")
    assert denied.error == ErrorCode.NOT_PARTICIPANT

    result = engine.trades.complete_trade("p1", "u2")
    assert result.success is True
    assert result.proposal.status == ProposalStatus.COMPLETED
    assert engine.trades.get_trade("trade_p1").status == TradeStatus.COMPLETED


def test_complete_trade_rejects_missing_or_not_accepted() -> None:
    engine = _build_fixture()
    engine.proposal_repo.insert(_s4s("p1", ProposalStatus.PENDING))

    assert engine.trades.complete_trade("missing", "u1").error == ErrorCode.NOT_FOUND
    assert engine.trades.complete_trade("p1", "u1").error == ErrorCode.INVALID_TRANSITION


def test_success_rate_rounds_half_up() -> None:
    engine = _build_fixture()
    repo = engine.proposal_repo
    repo.insert(_s4s("done", ProposalStatus.COMPLETED, completed_at=_at(2)))
    for i in range(7):
        repo.insert(_s4s(f"active-{i}", ProposalStatus.ACCEPTED, responded_at=_at(1)))

    stats = engine.trades.stats_for("u1")

    assert (stats.completed_trades, stats.total_trades) == (1, 8)
    assert stats.success_rate == 13


def test_success_rate_rounds_up_at_sixty_two_and_a_half() -> None:
    engine = _build_fixture()
    repo = engine.proposal_repo
    for i in range(5):
        repo.insert(_s4s(f"done-{i}", ProposalStatus.COMPLETED, completed_at=_at(2)))
    for i in range(3):
        repo.insert(_s4s(f"active-{i}", ProposalStatus.ACCEPTED, responded_at=_at(1)))

    assert engine.trades.stats_for("u1").success_rate == 63


def test_favorite_category_tie_goes_to_later_category() -> None:
    engine = _build_fixture()
    repo = engine.proposal_repo
    repo.insert(
        _s4s("cook", ProposalStatus.COMPLETED, completed_at=_at(2), created_at=_at(0))
    )
    repo.insert(
        _s4s(
            "plumb",
            ProposalStatus.COMPLETED,
            offered_skill_id="s-plumb",
            offered_skill_title="Plumbing",
            requested_skill_id="s-cook",
            requested_skill_title="Italian Cooking",
            completed_at=_at(3),
            created_at=_at(1),
        )
    )

    assert engine.trades.stats_for("u1").favorite_category == SkillCategory.REPAIRS
