from __future__ import annotations

from dataclasses import dataclass

import pytest
from fastapi.testclient import TestClient

from barter_service.app.config import AppConfig, get_app_config
from barter_service.app.main import app
from barter_service.app.services.credit_service import (
    get_credit_transaction_repository,
)
from barter_service.app.services.message_service import get_message_repository
from barter_service.app.services.proposal_service import get_proposal_repository
from barter_service.app.services.skill_service import get_skill_offer_repository
from barter_service.app.services.user_directory import (
    SessionCache,
    get_session_cache,
    get_user_repository,
)
from barter_service.tests.fakes import (
    FakeCreditTransactionRepository,
    FakeMessageRepository,
    FakeProposalRepository,
    FakeSkillOfferRepository,
    FakeUserRepository,
    build_user,
    credits_for_skill_payload,
    skill_for_credits_payload,
)


@dataclass
class ApiFixture:
    client: TestClient
    users: FakeUserRepository
    proposals: FakeProposalRepository
    transactions: FakeCreditTransactionRepository
    skills: FakeSkillOfferRepository
    messages: FakeMessageRepository


@pytest.fixture
def api():
    users = FakeUserRepository(
        [
            build_user("u1", credits=5, email="sarah@example.com"),
            build_user("u2", credits=5, email="mike@example.com"),
        ]
    )
    proposals = FakeProposalRepository()
    transactions = FakeCreditTransactionRepository()
    skills = FakeSkillOfferRepository()
    messages = FakeMessageRepository()
    session = SessionCache()

    app.dependency_overrides[get_user_repository] = lambda: users
    app.dependency_overrides[get_proposal_repository] = lambda: proposals
    app.dependency_overrides[get_credit_transaction_repository] = lambda: transactions
    app.dependency_overrides[get_skill_offer_repository] = lambda: skills
    app.dependency_overrides[get_message_repository] = lambda: messages
    app.dependency_overrides[get_session_cache] = lambda: session
    app.dependency_overrides[get_app_config] = lambda: AppConfig()

    yield ApiFixture(
        client=TestClient(app),
        users=users,
        proposals=proposals,
        transactions=transactions,
        skills=skills,
        messages=messages,
    )

    app.dependency_overrides.clear()


def test_health(api: ApiFixture) -> None:
    response = api.client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "X-Request-Id" in response.headers


def test_register_login_and_me(api: ApiFixture) -> None:
    created = api.client.post(
        "/api/v1/users/register",
        json={"name": "Ana", "email": "ana@example.com", "password": "pw"},
    )
    assert created.status_code == 201
    assert created.json()["credits"] == 3

    duplicate = api.client.post(
        "/api/v1/users/register",
        json={"name": "Ana", "email": "ana@example.com"},
    )
    assert duplicate.status_code == 409

    me = api.client.get("/api/v1/users/me")
    assert me.json()["email"] == "ana@example.com"

    assert api.client.post("/api/v1/users/logout").status_code == 200
    assert api.client.get("/api/v1/users/me").status_code == 401

    logged_in = api.client.post(
        "/api/v1/users/login", json={"email": "sarah@example.com", "password": "x"}
    )
    assert logged_in.status_code == 200
    assert logged_in.json()["user_id"] == "u1"

    unknown = api.client.post("/api/v1/users/login", json={"email": "nobody@example.com"})
    assert unknown.status_code == 401


def test_get_and_list_users(api: ApiFixture) -> None:
    assert api.client.get("/api/v1/users/u1").json()["credits"] == 5
    assert api.client.get("/api/v1/users/missing").status_code == 404

    listing = api.client.get("/api/v1/users").json()
    assert listing["total"] == 2


def test_credit_transfer_and_history(api: ApiFixture) -> None:
    response = api.client.post(
        "/api/v1/credits/transfer",
        json={"from_user_id": "u1", "to_user_id": "u2", "amount": 2},
    )
    assert response.status_code == 201
    assert response.json()["type"] == "transfer"

    assert api.client.get("/api/v1/credits/u1/balance").json()["balance"] == 3
    assert api.client.get("/api/v1/credits/u2/balance").json()["balance"] == 7
    assert api.client.get("/api/v1/credits/ghost/balance").status_code == 404

    history = api.client.get("/api/v1/credits/u1/history").json()
    assert history["total"] == 1
    assert history["items"][0]["amount"] == 2


@pytest.mark.parametrize(
    ("body", "status_code", "code"),
    [
        ({"from_user_id": "u1", "to_user_id": "u2", "amount": 50}, 402, "insufficient_credits"),
        ({"from_user_id": "u1", "to_user_id": "u2", "amount": 0}, 422, "invalid_amount"),
        ({"from_user_id": "u1", "to_user_id": "ghost", "amount": 1}, 404, "not_found"),
    ],
)
def test_credit_transfer_errors(
    api: ApiFixture, body: dict, status_code: int, code: str
) -> None:
    response = api.client.post("/api/v1/credits/transfer", json=body)

    assert response.status_code == status_code
    assert response.json()["detail"]["code"] == code
    assert api.transactions.transactions == []


def test_bonus_and_refund(api: ApiFixture) -> None:
    bonus = api.client.post("/api/v1/credits/u1/bonus", json={"amount": 2})
    refund = api.client.post(
        "/api/v1/credits/u1/refund", json={"amount": 1, "description": "Oops"}
    )

    assert bonus.json()["from_user_id"] == "system"
    assert refund.json()["type"] == "refund"
    assert api.users.find_by_id("u1").credits == 8


def test_proposal_lifecycle_over_http(api: ApiFixture) -> None:
    created = api.client.post(
        "/api/v1/proposals", json=credits_for_skill_payload("u1", "u2", offered_credits=2)
    )
    assert created.status_code == 201
    proposal_id = created.json()["proposal_id"]
    assert created.json()["status"] == "pending"

    listing = api.client.get("/api/v1/proposals", params={"user_id": "u2"}).json()
    assert [p["proposal_id"] for p in listing["received"]] == [proposal_id]

    forbidden = api.client.post(
        f"/api/v1/proposals/{proposal_id}/accept", params={"actor_id": "u1"}
    )
    assert forbidden.status_code == 403

    accepted = api.client.post(
        f"/api/v1/proposals/{proposal_id}/accept",
        params={"actor_id": "u2"},
        json={"location": "Library", "time": "2024-01-25T14:00:00Z"},
    )
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "accepted"
    assert accepted.json()["meeting_location"] == "Library"
    assert api.users.find_by_id("u1").credits == 3

    again = api.client.post(f"/api/v1/proposals/{proposal_id}/accept")
    assert again.status_code == 409
    assert again.json()["detail"]["code"] == "invalid_transition"

    trades = api.client.get("/api/v1/trades", params={"user_id": "u1"}).json()
    assert [t["id"] for t in trades["active"]] == [f"trade_{proposal_id}"]

    completed = api.client.post(
        f"/api/v1/trades/trade_{proposal_id}/complete", params={"user_id": "u2"}
    )
    assert completed.status_code == 200
    assert completed.json()["status"] == "completed"
    assert all(m["is_completed"] for m in completed.json()["progress"]["milestones"])

    stats = api.client.get("/api/v1/trades/stats", params={"user_id": "u2"}).json()
    assert stats["completed_trades"] == 1
    assert stats["success_rate"] == 100
    assert stats["skills_taught"] == 1
    assert stats["total_credits_earned"] == 3


def test_create_proposal_validation_error(api: ApiFixture) -> None:
    payload = credits_for_skill_payload()
    del payload["offered_credits"]

    response = api.client.post("/api/v1/proposals", json=payload)

    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "validation_error"


def test_accept_with_insufficient_credits_reports_transfer_failure(api: ApiFixture) -> None:
    created = api.client.post(
        "/api/v1/proposals", json=skill_for_credits_payload("u1", "u2", requested_credits=9)
    ).json()

    response = api.client.post(f"/api/v1/proposals/{created['proposal_id']}/accept")

    assert response.status_code == 402
    detail = response.json()["detail"]
    assert detail["code"] == "credit_transfer_failed"
    assert detail["cause"] == "insufficient_credits"
    fetched = api.client.get(f"/api/v1/proposals/{created['proposal_id']}").json()
    assert fetched["status"] == "pending"


def test_decline_and_cancel(api: ApiFixture) -> None:
    first = api.client.post("/api/v1/proposals", json=credits_for_skill_payload()).json()
    second = api.client.post("/api/v1/proposals", json=credits_for_skill_payload()).json()

    declined = api.client.post(f"/api/v1/proposals/{first['proposal_id']}/decline")
    cancelled = api.client.post(
        f"/api/v1/proposals/{second['proposal_id']}/cancel", params={"actor_id": "u1"}
    )

    assert declined.json()["status"] == "declined"
    assert cancelled.json()["status"] == "cancelled"
    assert api.client.post(f"/api/v1/proposals/{first['proposal_id']}/complete").status_code == 409


def test_unknown_proposal_and_trade(api: ApiFixture) -> None:
    assert api.client.get("/api/v1/proposals/missing").status_code == 404
    assert api.client.post("/api/v1/proposals/missing/decline").status_code == 404
    assert api.client.get("/api/v1/trades/trade_missing").status_code == 404
    assert (
        api.client.post("/api/v1/trades/bogus/complete", params={"user_id": "u1"}).status_code
        == 404
    )


def test_skill_offer_catalogue_feeds_trade_category(api: ApiFixture) -> None:
    created = api.client.post(
        "/api/v1/skills",
        json={"user_id": "u2", "title": "Guitar", "category": "music"},
    )
    assert created.status_code == 201
    skill_id = created.json()["skill_id"]

    assert api.client.get(f"/api/v1/skills/{skill_id}").json()["title"] == "Guitar"
    listing = api.client.get("/api/v1/skills", params={"user_id": "u2"}).json()
    assert [o["skill_id"] for o in listing["items"]] == [skill_id]

    proposal = api.client.post(
        "/api/v1/proposals",
        json=credits_for_skill_payload("u1", "u2", requested_skill_id=skill_id),
    ).json()
    api.client.post(f"/api/v1/proposals/{proposal['proposal_id']}/accept")

    trade = api.client.get(f"/api/v1/trades/trade_{proposal['proposal_id']}").json()
    assert trade["trade_details"]["requested"]["skill_category"] == "music"


def test_skill_offer_errors(api: ApiFixture) -> None:
    unknown_user = api.client.post(
        "/api/v1/skills", json={"user_id": "ghost", "title": "Magic"}
    )
    bad_category = api.client.post(
        "/api/v1/skills", json={"user_id": "u1", "title": "Magic", "category": "wizardry"}
    )

    assert unknown_user.status_code == 404
    assert bad_category.status_code == 422
    assert api.client.get("/api/v1/skills/missing").status_code == 404
    assert api.skills.list_all() == []


def test_messages_over_http(api: ApiFixture) -> None:
    sent = api.client.post(
        "/api/v1/messages",
        json={"sender_id": "u2", "receiver_id": "u1", "content": "Saturday works?"},
    )
    assert sent.status_code == 201
    conversation_id = sent.json()["conversation_id"]
    assert conversation_id == "conv_u1_u2"

    unread = api.client.get("/api/v1/messages/unread-count", params={"user_id": "u1"})
    assert unread.json()["unread_count"] == 1

    conversations = api.client.get(
        "/api/v1/messages/conversations", params={"user_id": "u1"}
    ).json()
    assert [c["conversation_id"] for c in conversations] == [conversation_id]
    assert conversations[0]["unread_count"] == 1

    thread = api.client.get(f"/api/v1/messages/conversations/{conversation_id}").json()
    assert [m["content"] for m in thread] == ["Saturday works?"]

    marked = api.client.post(
        f"/api/v1/messages/conversations/{conversation_id}/read",
        params={"user_id": "u1"},
    )
    assert marked.json()["marked"] == 1
    unread = api.client.get("/api/v1/messages/unread-count", params={"user_id": "u1"})
    assert unread.json()["unread_count"] == 0


@pytest.mark.parametrize(
    ("body", "status_code"),
    [
        ({"sender_id": "u1", "receiver_id": "u1", "content": "me"}, 422),
        ({"sender_id": "u1", "receiver_id": "ghost", "content": "hi"}, 404),
        ({"sender_id": "u1", "receiver_id": "u2", "content": "   "}, 422),
    ],
)
def test_send_message_errors(api: ApiFixture, body: dict, status_code: int) -> None:
    response = api.client.post("/api/v1/messages", json=body)

    assert response.status_code == status_code
    assert api.messages.messages == []
