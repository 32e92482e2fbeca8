from __future__ import annotations

import logging
import threading
from typing import Optional

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

from .config import load_mongo_settings


logger = logging.getLogger(__name__)


# 컬렉션 이름. 모든 서비스가 같은 이름을 공유한다.
USERS_COLLECTION = "users"
PROPOSALS_COLLECTION = "proposals"
CREDIT_TRANSACTIONS_COLLECTION = "credit_transactions"
SKILL_OFFERS_COLLECTION = "skill_offers"
MESSAGES_COLLECTION = "messages"


_client: Optional[MongoClient] = None
_db: Optional[Database] = None
_lock = threading.Lock()


def get_client() -> MongoClient:
    """전역 MongoClient 싱글톤을 반환한다.

    - MONGO_URI 에서 URI 를 읽어온다.
    - ping 으로 연결을 검증한다.
    - 각 컬렉션의 식별자 유니크 인덱스를 한 번만 생성한다.
    """

    global _client, _db

    if _client is not None:
        return _client

    with _lock:
        if _client is not None:
            return _client

        settings = load_mongo_settings()
        client: MongoClient = MongoClient(
            settings.uri,
            tz_aware=True,
            serverSelectionTimeoutMS=settings.server_selection_timeout_ms,
        )

        try:
            client.admin.command("ping")
        except Exception as exc:  # noqa: BLE001
            client.close()
            raise RuntimeError(f"failed to connect to MongoDB: {exc}") from exc

        try:
            if settings.db_name:
                db = client[settings.db_name]
            else:
                db = client.get_default_database()
        except Exception as exc:  # noqa: BLE001
            client.close()
            raise RuntimeError(
                "MongoDB database name must be specified via MONGO_DB_NAME or in MONGO_URI (mongodb://.../db_name)",
            ) from exc

        try:
            ensure_indexes(db)
        except Exception as exc:  # noqa: BLE001
            logger.error("failed to ensure MongoDB indexes: %s", exc)
            client.close()
            raise

        _client = client
        _db = db
        logger.info("MongoDB connected and indexes ensured (db=%s)", db.name)
        return _client


def get_database() -> Database:
    """전역 기본 Database 객체를 반환한다."""

    if _db is None:
        get_client()
    assert _db is not None
    return _db


def close_client() -> None:
    """싱글톤 연결을 닫는다. 애플리케이션 종료 시 lifespan 에서 호출된다."""

    global _client, _db

    with _lock:
        if _client is not None:
            _client.close()
        _client = None
        _db = None


def ensure_indexes(db: Database) -> None:
    """각 컬렉션의 식별자 유니크 인덱스와 조회용 인덱스를 생성한다.

    중복 생성해도 MongoDB 가 처리하므로 idempotent 하다.
    """

    users = db[USERS_COLLECTION]
    users.create_index([("user_id", ASCENDING)], name="uniq_user_id", unique=True)
    users.create_index([("email", ASCENDING)], name="uniq_email", unique=True)

    proposals = db[PROPOSALS_COLLECTION]
    proposals.create_index(
        [("proposal_id", ASCENDING)], name="uniq_proposal_id", unique=True
    )
    proposals.create_index(
        [("from_user_id", ASCENDING), ("created_at", ASCENDING)],
        name="idx_from_user_created_at",
    )
    proposals.create_index(
        [("to_user_id", ASCENDING), ("created_at", ASCENDING)],
        name="idx_to_user_created_at",
    )

    transactions = db[CREDIT_TRANSACTIONS_COLLECTION]
    transactions.create_index(
        [("transaction_id", ASCENDING)], name="uniq_transaction_id", unique=True
    )
    transactions.create_index(
        [("from_user_id", ASCENDING), ("created_at", DESCENDING)],
        name="idx_from_user_created_at_desc",
    )
    transactions.create_index(
        [("to_user_id", ASCENDING), ("created_at", DESCENDING)],
        name="idx_to_user_created_at_desc",
    )

    skills = db[SKILL_OFFERS_COLLECTION]
    skills.create_index([("skill_id", ASCENDING)], name="uniq_skill_id", unique=True)
    skills.create_index(
        [("user_id", ASCENDING), ("created_at", DESCENDING)],
        name="idx_user_created_at_desc",
    )

    messages = db[MESSAGES_COLLECTION]
    messages.create_index(
        [("message_id", ASCENDING)], name="uniq_message_id", unique=True
    )
    messages.create_index(
        [("conversation_id", ASCENDING), ("sent_at", ASCENDING)],
        name="idx_conversation_sent_at",
    )
    messages.create_index(
        [("receiver_id", ASCENDING), ("is_read", ASCENDING)],
        name="idx_receiver_unread",
    )
