"""Data models for on-call records, query filters and time windows."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import pydantic

from .errors import InvalidRangeError


def as_utc(value: datetime) -> datetime:
    # Same-tzinfo arithmetic and comparison in Python use wall-clock time and
    # ignore fold; go through UTC so they work on real instants.
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc)


def elapsed(start: datetime, end: datetime) -> timedelta:
    """Elapsed time between two instants, ignoring calendar semantics."""
    return as_utc(end) - as_utc(start)


def check_time_order(start: datetime, end: datetime) -> None:
    """Raise InvalidRangeError unless start is a strictly earlier instant than end."""
    if (start.tzinfo is None) != (end.tzinfo is None):
        raise InvalidRangeError(start, end, reason='cannot mix naive and offset-aware bounds')
    if elapsed(start, end) <= timedelta(0):
        raise InvalidRangeError(start, end)


class TimeWindow(pydantic.BaseModel):
    """
    A half-open [start, end) interval.

    Windows produced by the segmenter always have both bounds. A requested
    range supplied by the caller may leave either bound open, in which case
    the upstream default window applies.
    """

    model_config = pydantic.ConfigDict(frozen=True)

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @pydantic.model_validator(mode='after')
    def validate_time_order(self) -> 'TimeWindow':
        if self.start is not None and self.end is not None:
            check_time_order(self.start, self.end)
        return self

    @property
    def is_bounded(self) -> bool:
        return self.start is not None and self.end is not None


class QueryFilter(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(frozen=True)

    user_ids: frozenset[str] = frozenset()
    policy_ids: frozenset[str] = frozenset()
    earliest: bool = False
    time_zone: Optional[str] = None


class Participant(pydantic.BaseModel):
    id: str
    summary: str = ''


class OnCallRecord(pydantic.BaseModel):
    """One interval during which a user was on call, as returned upstream."""

    model_config = pydantic.ConfigDict(extra='allow')

    start: Optional[str] = None
    end: Optional[str] = None
    user: Participant


class OnCallPage(pydantic.BaseModel):
    oncalls: list[OnCallRecord] = []
    total: Optional[int] = None

    @pydantic.field_validator('oncalls', mode='before')
    @classmethod
    def default_missing_oncalls(cls, v):
        return [] if v is None else v


class ParticipantTotal(pydantic.BaseModel):
    participant_id: str
    participant_name: str
    hours: float = 0.0

    @pydantic.field_validator('hours')
    @classmethod
    def validate_hours(cls, v: float) -> float:
        if v < 0:
            raise ValueError('hours cannot be negative')
        return v

    @property
    def label(self) -> str:
        return f"{self.participant_name} ({self.participant_id})"


class EscalationPolicy(pydantic.BaseModel):
    id: str
    summary: str = ''
