"""Reduction of on-call records into per-participant hour totals."""

from datetime import datetime
from typing import Iterable

from .errors import TimestampParseError
from .models import OnCallRecord, ParticipantTotal


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp as returned by the API ('Z' suffix allowed)."""
    if not isinstance(value, str):
        raise TimestampParseError(value, reason='expected a string')
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError as error:
        raise TimestampParseError(value) from error


def record_hours(record: OnCallRecord) -> float:
    start_at = parse_timestamp(record.start)
    end_at = parse_timestamp(record.end)
    try:
        duration = end_at - start_at
    except TypeError as error:
        raise TimestampParseError(record.end, reason='cannot mix naive and offset-aware timestamps') from error
    if duration.total_seconds() < 0:
        raise TimestampParseError(record.end, reason=f'ends before its start {record.start!r}')
    return duration.total_seconds() / 3600


def summarize(records: Iterable[OnCallRecord]) -> list[ParticipantTotal]:
    """
    Total the on-call hours of each participant.

    Records without a start or an end are skipped. Records are grouped by
    user id alone; when the same id shows up under different display names,
    the first name seen is kept.

    Args:
        records: On-call records in any order

    Returns:
        One total per participant, most hours first. Equal totals keep the
        order in which their participants were first seen.

    Raises:
        TimestampParseError: if a start or end cannot be parsed, or a record
            ends before it starts
    """
    totals: dict[str, ParticipantTotal] = {}

    for record in records:
        if not record.start or not record.end:
            continue

        hours = record_hours(record)
        user_id = record.user.id
        if user_id not in totals:
            totals[user_id] = ParticipantTotal(
                participant_id=user_id,
                participant_name=record.user.summary,
                hours=0.0,
            )
        totals[user_id].hours += hours

    # sorted() is stable and dicts keep insertion order
    return sorted(totals.values(), key=lambda total: -total.hours)
