"""Windowed PagerDuty on-call retrieval and per-user hour summaries."""

from .errors import (
    OnCallSummaryError,
    InvalidRangeError,
    SourceQueryError,
    TimestampParseError
)
from .models import (
    TimeWindow,
    QueryFilter,
    Participant,
    OnCallRecord,
    OnCallPage,
    ParticipantTotal,
    EscalationPolicy
)
from .windowing import segment_window
from .fetching import OnCallSource, fetch_window, aggregate_range
from .summary import summarize

__all__ = [
    'OnCallSummaryError',
    'InvalidRangeError',
    'SourceQueryError',
    'TimestampParseError',
    'TimeWindow',
    'QueryFilter',
    'Participant',
    'OnCallRecord',
    'OnCallPage',
    'ParticipantTotal',
    'EscalationPolicy',
    'segment_window',
    'OnCallSource',
    'fetch_window',
    'aggregate_range',
    'summarize'
]
