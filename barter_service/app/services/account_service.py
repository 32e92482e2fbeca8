"""회원가입/로그인.

비밀번호는 검증하지 않는다. 로그인은 이메일로 유저를 찾아 세션 캐시에 올리는 것이 전부다.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import Depends

from common.models.user import User, UserRegisterInput
from common.types.datetime import utc_now

from ..config import AppConfig, EconomyConfig, get_app_config
from .credit_service import CreditService, get_credit_service
from .user_directory import UserDirectory, get_user_directory


logger = logging.getLogger(__name__)


class AccountService:
    def __init__(
        self,
        directory: UserDirectory,
        credit_service: CreditService,
        economy: EconomyConfig,
    ) -> None:
        self._directory = directory
        self._credit_service = credit_service
        self._economy = economy

    def register(self, input_model: UserRegisterInput) -> User | None:
        """새 유저를 만들고 세션 유저로 설정한다. 이메일이 이미 있으면 None."""
        if self._directory.get_by_email(input_model.email) is not None:
            logger.warning("registration rejected: email already exists")
            return None

        now = utc_now()
        user = User(
            user_id=str(uuid.uuid4()),
            credits=self._economy.starter_credits,
            rating=5.0,
            completed_trades=0,
            joined_at=now,
            updated_at=now,
            **input_model.model_dump(),
        )
        created = self._directory.upsert(user)
        self._directory.set_current_user(created)
        logger.info("user registered", extra={"user_id": created.user_id})
        return created

    def login(self, email: str, password: str) -> User | None:  # noqa: ARG002
        """이메일로 로그인한다. 잔액이 login_credit_floor 미만이면 그만큼 보너스로 채운다."""
        user = self._directory.get_by_email(email)
        if user is None:
            return None

        shortfall = self._economy.login_credit_floor - user.credits
        if shortfall > 0:
            result = self._credit_service.award_bonus(
                user.user_id, shortfall, "Login credit top-up"
            )
            if result.success:
                user = self._directory.get(user.user_id) or user

        self._directory.set_current_user(user)
        logger.info("user logged in", extra={"user_id": user.user_id})
        return user

    def logout(self) -> None:
        self._directory.set_current_user(None)

    @property
    def current_user(self) -> User | None:
        return self._directory.current_user


def get_account_service(
    directory: UserDirectory = Depends(get_user_directory),
    credit_service: CreditService = Depends(get_credit_service),
    config: AppConfig = Depends(get_app_config),
) -> AccountService:
    """FastAPI DI용 AccountService 팩토리."""

    return AccountService(
        directory=directory,
        credit_service=credit_service,
        economy=config.economy,
    )
