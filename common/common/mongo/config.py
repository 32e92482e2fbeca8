from __future__ import annotations

import os
from dataclasses import dataclass


MONGO_URI_ENV = "MONGO_URI"
MONGO_DB_NAME_ENV = "MONGO_DB_NAME"
MONGO_TIMEOUT_MS_ENV = "MONGO_SERVER_SELECTION_TIMEOUT_MS"

DEFAULT_SERVER_SELECTION_TIMEOUT_MS = 5000


@dataclass(slots=True, frozen=True)
class MongoSettings:
    """Ledger Store(MongoDB) 접속 설정.

    - uri: 필수. 비어 있으면 load_mongo_settings 에서 RuntimeError 를 던진다.
    - db_name: 선택. 없으면 URI 에 포함된 기본 DB 를 사용한다.
    """

    uri: str
    db_name: str | None = None
    server_selection_timeout_ms: int = DEFAULT_SERVER_SELECTION_TIMEOUT_MS


def load_mongo_settings() -> MongoSettings:
    """환경 변수에서 MongoSettings 를 읽어 온다."""

    uri = os.getenv(MONGO_URI_ENV, "").strip()
    if not uri:
        raise RuntimeError(
            f"{MONGO_URI_ENV} environment variable is required for MongoDB",
        )

    db_name = os.getenv(MONGO_DB_NAME_ENV, "").strip() or None

    raw_timeout = os.getenv(MONGO_TIMEOUT_MS_ENV, "").strip()
    if not raw_timeout:
        timeout_ms = DEFAULT_SERVER_SELECTION_TIMEOUT_MS
    else:
        try:
            timeout_ms = int(raw_timeout)
        except ValueError as exc:
            raise RuntimeError(
                f"invalid {MONGO_TIMEOUT_MS_ENV}: {raw_timeout!r}",
            ) from exc

    return MongoSettings(
        uri=uri,
        db_name=db_name,
        server_selection_timeout_ms=timeout_ms,
    )
