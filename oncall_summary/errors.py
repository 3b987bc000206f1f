"""Exceptions raised while collecting and summarizing on-call records."""

from datetime import datetime
from typing import Optional


class OnCallSummaryError(Exception):
    """Base class for failures that abort a summary run."""

    stage = 'summary'


class InvalidRangeError(OnCallSummaryError):
    stage = 'segmentation'

    def __init__(self, start: datetime, end: datetime, reason: str = 'start must be before end'):
        self.start = start
        self.end = end
        super().__init__(f"invalid range {start.isoformat()} .. {end.isoformat()}: {reason}")


class SourceQueryError(OnCallSummaryError):
    """The record source answered with a non-success status or an unusable payload."""

    stage = 'fetch'

    def __init__(self, status: Optional[int], body: str, operation: str = 'oncalls'):
        self.status = status
        self.body = body
        self.operation = operation
        status_text = status if status is not None else 'no response'
        super().__init__(f"{operation} query failed ({status_text}): {body}")


class TimestampParseError(OnCallSummaryError, ValueError):
    stage = 'parse'

    def __init__(self, value: object, reason: str = 'not an ISO-8601 timestamp'):
        self.value = value
        super().__init__(f"cannot parse timestamp {value!r}: {reason}")
