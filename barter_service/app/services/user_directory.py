from __future__ import annotations

import logging
import threading

from fastapi import Depends
from pymongo.database import Database

from common.models.user import User
from common.mongo.client import get_database

from ..repositories.interfaces import UserRepositoryInterface
from ..repositories.user_repository import UserRepository
from .ledger_lock import get_ledger_lock


logger = logging.getLogger(__name__)


class SessionCache:
    """현재 로그인한 유저의 캐시 사본.

    단일 클라이언트 시뮬레이션을 전제로 프로세스당 하나만 둔다.
    """

    def __init__(self) -> None:
        self._user: User | None = None

    @property
    def user(self) -> User | None:
        return self._user

    def set(self, user: User | None) -> None:
        self._user = user

    def clear(self) -> None:
        self._user = None


class UserDirectory:
    """유저 레코드 조회/갱신.

    - 잔액이나 평점 범위는 검증하지 않는다. 음수 잔액을 쓰지 않는 것은 호출자의 책임이다.
    - upsert 한 유저가 현재 세션 유저이면 세션 캐시도 함께 갱신한다.
    """

    def __init__(
        self,
        user_repo: UserRepositoryInterface,
        session: SessionCache | None = None,
        lock: threading.RLock | None = None,
    ) -> None:
        self._user_repo = user_repo
        self._session = session or SessionCache()
        self._lock = lock or get_ledger_lock()

    def get(self, user_id: str) -> User | None:
        return self._user_repo.find_by_id(user_id)

    def get_by_email(self, email: str) -> User | None:
        return self._user_repo.find_by_email(email)

    def get_all(self) -> list[User]:
        return self._user_repo.list_all()

    def upsert(self, user: User) -> User:
        with self._lock:
            saved = self._user_repo.upsert(user)
            current = self._session.user
            if current is not None and current.user_id == saved.user_id:
                self._session.set(saved)
                logger.debug("session user refreshed (user_id=%s)", saved.user_id)
            return saved

    @property
    def current_user(self) -> User | None:
        return self._session.user

    def set_current_user(self, user: User | None) -> None:
        self._session.set(user)


_session_cache = SessionCache()


def get_session_cache() -> SessionCache:
    """프로세스 전역 세션 캐시."""

    return _session_cache


def get_user_repository(
    db: Database = Depends(get_database),
) -> UserRepositoryInterface:
    """FastAPI DI용 UserRepository 팩토리."""

    return UserRepository(db)


def get_user_directory(
    user_repo: UserRepositoryInterface = Depends(get_user_repository),
    session: SessionCache = Depends(get_session_cache),
) -> UserDirectory:
    """FastAPI DI용 UserDirectory 팩토리."""

    return UserDirectory(user_repo=user_repo, session=session)
