from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated

from pydantic.functional_serializers import PlainSerializer
from pydantic.functional_validators import AfterValidator


def normalize_to_utc(value: datetime) -> datetime:
    """naive datetime 은 UTC 로 간주하고, aware datetime 은 UTC 로 변환한다."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def serialize_datetime_to_utc_iso8601(value: datetime) -> str:
    """모든 datetime을 UTC 기준 ISO8601(+타임존) 문자열로 직렬화한다."""
    return normalize_to_utc(value).isoformat()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# 도메인 모델의 모든 시각 필드는 UTC aware 로 정규화되어 서로 비교 가능하다.
UtcDateTime = Annotated[
    datetime,
    AfterValidator(normalize_to_utc),
    PlainSerializer(
        serialize_datetime_to_utc_iso8601,
        return_type=str,
        when_used="json",
    ),
]
