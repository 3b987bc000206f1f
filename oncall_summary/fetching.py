"""Paginated retrieval of on-call records across one or more time windows."""

import logging
from datetime import timedelta
from typing import Protocol

from .models import OnCallPage, OnCallRecord, QueryFilter, TimeWindow, elapsed
from .windowing import segment_window

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100
DEFAULT_MAX_SPAN = timedelta(days=90)


class OnCallSource(Protocol):
    """Anything that can answer one bounded-size on-call query."""

    def fetch_oncalls_page(
        self,
        *,
        window: TimeWindow,
        query_filter: QueryFilter,
        limit: int,
        offset: int,
    ) -> OnCallPage:
        """Return one page of records plus the total matching the filters."""


def fetch_window(
    source: OnCallSource,
    window: TimeWindow,
    query_filter: QueryFilter,
    *,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> list[OnCallRecord]:
    """
    Fetch every on-call record for a single window.

    Pages are requested with an offset starting at 0 that advances by
    page_size after each page, whatever the page actually held. The loop
    stops once the number of records collected reaches the total reported
    by the source, so an exact multiple of page_size never costs an extra
    empty request.

    Args:
        source: The record source to query
        window: Window passed verbatim to every page query
        query_filter: Filters passed verbatim to every page query
        page_size: Maximum records per page

    Returns:
        All records of the window in page order

    Raises:
        SourceQueryError: propagated from the source on any failed page
    """
    if page_size <= 0:
        raise ValueError('page_size must be greater than 0')

    records: list[OnCallRecord] = []
    offset = 0

    while True:
        page = source.fetch_oncalls_page(
            window=window,
            query_filter=query_filter,
            limit=page_size,
            offset=offset,
        )
        records.extend(page.oncalls)
        total = page.total if page.total is not None else len(records)
        logger.debug(
            "Fetched %d records at offset %d (%d/%d)",
            len(page.oncalls), offset, len(records), total,
        )

        if len(records) >= total:
            break
        if not page.oncalls:
            logger.warning(
                "Source reported %d records but returned an empty page at offset %d; stopping with %d",
                total, offset, len(records),
            )
            break

        offset += page_size

    return records


def aggregate_range(
    source: OnCallSource,
    requested: TimeWindow,
    query_filter: QueryFilter,
    *,
    max_span: timedelta = DEFAULT_MAX_SPAN,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> list[OnCallRecord]:
    """
    Fetch every on-call record for a requested range of any length.

    Open-ended ranges and ranges within max_span go out as a single query.
    Longer ranges are segmented and fetched window by window, in order, with
    each window fully paginated before the next one starts.

    Returns:
        Records in window order, then page order
    """
    if not requested.is_bounded or elapsed(requested.start, requested.end) <= max_span:
        return fetch_window(source, requested, query_filter, page_size=page_size)

    records: list[OnCallRecord] = []
    for window in segment_window(requested.start, requested.end, max_span):
        records.extend(fetch_window(source, window, query_filter, page_size=page_size))

    logger.info("Collected %d records across the requested range", len(records))
    return records
