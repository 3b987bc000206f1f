"""Splitting of requested time ranges into windows the upstream API accepts."""

import logging
from datetime import datetime, timedelta

from .errors import InvalidRangeError
from .models import TimeWindow, as_utc, check_time_order, elapsed

logger = logging.getLogger(__name__)


def segment_window(start: datetime, end: datetime, max_span: timedelta) -> list[TimeWindow]:
    """
    Split [start, end) into consecutive windows no longer than max_span.

    Every window except the last is exactly max_span long; the last one holds
    the remainder and ends exactly at `end`. Lengths are compared as elapsed
    time, so DST transitions do not shorten or stretch a window.

    Args:
        start: Inclusive start of the requested range
        end: Exclusive end of the requested range
        max_span: Longest window the upstream API accepts

    Returns:
        Ordered, contiguous, non-overlapping windows covering the range

    Raises:
        InvalidRangeError: if start is not an earlier instant than end, the
            bounds mix naive and offset-aware datetimes, or max_span is not positive
    """
    check_time_order(start, end)
    if max_span <= timedelta(0):
        raise InvalidRangeError(start, end, reason=f'max span must be positive, got {max_span}')

    if elapsed(start, end) <= max_span:
        return [TimeWindow(start=start, end=end)]

    windows = []
    current_start = start
    utc_end = as_utc(end)

    while as_utc(current_start) < utc_end:
        boundary = as_utc(current_start) + max_span
        if boundary >= utc_end:
            # last window ends on the caller's own value, not a converted copy
            current_end = end
        elif start.tzinfo is not None:
            current_end = boundary.astimezone(start.tzinfo)
        else:
            current_end = boundary
        windows.append(TimeWindow(start=current_start, end=current_end))
        current_start = current_end

    logger.info(
        "Split %s .. %s into %d windows of at most %s",
        start.isoformat(), end.isoformat(), len(windows), max_span,
    )
    return windows
