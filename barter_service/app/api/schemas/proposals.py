from __future__ import annotations

from pydantic import BaseModel

from common.types.datetime import UtcDateTime

from ...models.proposal import MeetingDetails


class AcceptProposalRequest(BaseModel):
    """수락 시 함께 보낼 수 있는 만남 정보. 모두 생략 가능하다."""

    location: str | None = None
    time: UtcDateTime | None = None
    notes: str | None = None

    def to_meeting(self) -> MeetingDetails | None:
        meeting = MeetingDetails(location=self.location, time=self.time, notes=self.notes)
        return None if meeting.is_empty() else meeting
