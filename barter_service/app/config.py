from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml


DEFAULT_CONFIG_FILE_NAME = "config.yaml"


@dataclass(slots=True)
class EconomyConfig:
    """크레딧 경제 관련 상수.

    - starter_credits: 회원가입 시 지급하는 크레딧
    - login_credit_floor: 로그인 시 잔액이 이보다 적으면 이 값까지 채운다
    - completion_bonus: 거래 완료 시 참여자 각각에게 주는 보너스
    - seed_demo_data: 시작 시 비어 있는 컬렉션에 데모 데이터를 넣을지 여부
    """

    starter_credits: int = 3
    login_credit_floor: int = 3
    completion_bonus: int = 1
    seed_demo_data: bool = False


@dataclass(slots=True)
class AppConfig:
    """barter-service 전체 설정 루트."""

    economy: EconomyConfig = field(default_factory=EconomyConfig)


def _find_config_path() -> Path | None:
    """현재 작업 디렉토리 기준으로 상위로 올라가며 config.yaml 을 찾는다."""

    current = Path.cwd()
    for directory in (current, *current.parents):
        candidate = directory / DEFAULT_CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def _read_int(section: dict[str, Any], key: str, default: int, path: Path) -> int:
    raw = section.get(key, default)
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise RuntimeError(f"invalid economy.{key} in {path}: {raw!r}") from exc
    if value < 0:
        raise RuntimeError(f"economy.{key} must be >= 0 in {path}: {raw!r}")
    return value


_TRUE_STRINGS = frozenset({"true", "yes", "on", "1"})
_FALSE_STRINGS = frozenset({"false", "no", "off", "0"})


def _read_bool(section: dict[str, Any], key: str, default: bool, path: Path) -> bool:
    raw = section.get(key, default)
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.strip().lower() in _TRUE_STRINGS | _FALSE_STRINGS:
        return raw.strip().lower() in _TRUE_STRINGS
    raise RuntimeError(f"invalid economy.{key} in {path}: {raw!r}")


def load_economy_config(path: Path) -> EconomyConfig:
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    economy = data.get("economy") or {}
    if not isinstance(economy, dict):
        raise RuntimeError(f"economy section must be a mapping in {path}")

    defaults = EconomyConfig()
    return EconomyConfig(
        starter_credits=_read_int(economy, "starter_credits", defaults.starter_credits, path),
        login_credit_floor=_read_int(
            economy, "login_credit_floor", defaults.login_credit_floor, path
        ),
        completion_bonus=_read_int(
            economy, "completion_bonus", defaults.completion_bonus, path
        ),
        seed_demo_data=_read_bool(
            economy, "seed_demo_data", defaults.seed_demo_data, path
        ),
    )


def load_config(path: Path | None = None) -> AppConfig:
    """barter-service 설정을 로드한다. config.yaml 이 없으면 기본값을 쓴다."""

    path = path or _find_config_path()
    if path is None:
        return AppConfig()
    return AppConfig(economy=load_economy_config(path))


@lru_cache(maxsize=1)
def get_app_config() -> AppConfig:
    """FastAPI DI 용 설정 싱글톤."""

    return load_config()
