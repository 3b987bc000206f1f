"""
Tests for paginated fetching and range aggregation.

- Pagination termination and offsets
- Fail-fast on a failed page
- Unsegmented and segmented ranges
- Chunking does not change totals
"""

import pytest
from datetime import datetime, timedelta, timezone
import sys
import os

# Add parent directory to path to import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from oncall_summary import (
    OnCallPage,
    OnCallRecord,
    QueryFilter,
    SourceQueryError,
    TimeWindow,
    aggregate_range,
    fetch_window,
    summarize
)


def make_record(user_id, start, end, name=None):
    return OnCallRecord(
        start=start.isoformat() if start else None,
        end=end.isoformat() if end else None,
        user={'id': user_id, 'summary': name or user_id.lower()}
    )


class FakeSource:
    """
    In-memory record source.

    Serves records whose start falls inside the queried window, honours
    limit/offset and records every call it receives.
    """

    def __init__(self, records, fail_on_call=None, report_total=True):
        self.records = records
        self.fail_on_call = fail_on_call
        self.report_total = report_total
        self.calls = []

    def fetch_oncalls_page(self, *, window, query_filter, limit, offset):
        self.calls.append({
            'window': window,
            'query_filter': query_filter,
            'limit': limit,
            'offset': offset
        })
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise SourceQueryError(500, '{"error": "boom"}')

        matching = [r for r in self.records if self._in_window(r, window)]
        return OnCallPage(
            oncalls=matching[offset:offset + limit],
            total=len(matching) if self.report_total else None
        )

    @staticmethod
    def _in_window(record, window):
        start = datetime.fromisoformat(record.start)
        if window.start is not None and start < window.start:
            return False
        if window.end is not None and start >= window.end:
            return False
        return True


class CannedSource:
    """Returns pre-built pages in order, whatever the query."""

    def __init__(self, pages):
        self.pages = list(pages)
        self.offsets = []

    def fetch_oncalls_page(self, *, window, query_filter, limit, offset):
        self.offsets.append(offset)
        return self.pages.pop(0)


BASE = datetime(2025, 1, 1, tzinfo=timezone.utc)
WINDOW = TimeWindow(start=BASE, end=BASE + timedelta(days=30))
NO_FILTER = QueryFilter()


def hourly_records(count, user_id='PUSER1'):
    return [
        make_record(user_id, BASE + timedelta(hours=i), BASE + timedelta(hours=i, minutes=30))
        for i in range(count)
    ]


class TestPagination:
    """Test the page loop of a single window."""

    def test_partial_last_page(self):
        """Test total=250 with page size 100 takes exactly 3 requests."""
        source = FakeSource(hourly_records(250))

        records = fetch_window(source, WINDOW, NO_FILTER, page_size=100)

        assert len(records) == 250
        assert [c['offset'] for c in source.calls] == [0, 100, 200]
        assert all(c['limit'] == 100 for c in source.calls)

    def test_exact_page_boundary(self):
        """Test total=200 with page size 100 takes exactly 2 requests."""
        source = FakeSource(hourly_records(200))

        records = fetch_window(source, WINDOW, NO_FILTER, page_size=100)

        assert len(records) == 200
        assert [c['offset'] for c in source.calls] == [0, 100]

    def test_empty_window_single_request(self):
        """Test a window with zero total ends after one request."""
        source = FakeSource([])

        records = fetch_window(source, WINDOW, NO_FILTER, page_size=100)

        assert records == []
        assert len(source.calls) == 1

    def test_first_page_satisfies_total(self):
        """Test a window with fewer records than a page ends after one request."""
        source = FakeSource(hourly_records(42))

        records = fetch_window(source, WINDOW, NO_FILTER, page_size=100)

        assert len(records) == 42
        assert len(source.calls) == 1

    def test_records_kept_in_page_order(self):
        """Test records are returned in page order."""
        expected = hourly_records(7)
        source = FakeSource(expected)

        records = fetch_window(source, WINDOW, NO_FILTER, page_size=3)

        assert records == expected
        assert [c['offset'] for c in source.calls] == [0, 3, 6]

    def test_offset_advances_by_page_size_on_short_page(self):
        """Test offset advances by page size even when a page comes back short."""
        short_page = OnCallPage(oncalls=hourly_records(60), total=150)
        last_page = OnCallPage(oncalls=hourly_records(90), total=150)
        source = CannedSource([short_page, last_page])

        records = fetch_window(source, WINDOW, NO_FILTER, page_size=100)

        assert len(records) == 150
        assert source.offsets == [0, 100]

    def test_missing_total_stops_after_first_page(self):
        """Test a response without a total is treated as complete."""
        source = FakeSource(hourly_records(150), report_total=False)

        records = fetch_window(source, WINDOW, NO_FILTER, page_size=100)

        assert len(records) == 100
        assert len(source.calls) == 1

    def test_empty_page_short_of_total_stops(self):
        """Test an empty page ends the loop even if the total was not reached."""
        source = CannedSource([
            OnCallPage(oncalls=hourly_records(100), total=300),
            OnCallPage(oncalls=[], total=300)
        ])

        records = fetch_window(source, WINDOW, NO_FILTER, page_size=100)

        assert len(records) == 100
        assert source.offsets == [0, 100]

    def test_filter_passed_to_every_page(self):
        """Test the same window and filter go out with every page."""
        query_filter = QueryFilter(user_ids=frozenset({'PUSER1'}), earliest=True, time_zone='UTC')
        source = FakeSource(hourly_records(5))

        fetch_window(source, WINDOW, query_filter, page_size=2)

        assert len(source.calls) == 3
        assert all(c['query_filter'] == query_filter for c in source.calls)
        assert all(c['window'] == WINDOW for c in source.calls)

    def test_invalid_page_size(self):
        """Test that a non-positive page size is rejected before any request."""
        source = FakeSource([])

        with pytest.raises(ValueError):
            fetch_window(source, WINDOW, NO_FILTER, page_size=0)
        assert source.calls == []


class TestFailFast:
    """Test that a failed request aborts the run."""

    def test_failure_on_second_page(self):
        """Test a non-200 on page 2 of 3 raises and no records escape."""
        source = FakeSource(hourly_records(250), fail_on_call=2)

        with pytest.raises(SourceQueryError) as excinfo:
            fetch_window(source, WINDOW, NO_FILTER, page_size=100)

        assert excinfo.value.status == 500
        assert len(source.calls) == 2

    def test_failure_in_later_window_aborts_range(self):
        """Test a failure in the second window aborts the whole aggregation."""
        start = BASE
        end = BASE + timedelta(days=120)
        records = [
            make_record('PUSER1', start + timedelta(days=d), start + timedelta(days=d, hours=1))
            for d in range(0, 120, 10)
        ]
        source = FakeSource(records, fail_on_call=2)

        with pytest.raises(SourceQueryError):
            aggregate_range(source, TimeWindow(start=start, end=end), NO_FILTER,
                            max_span=timedelta(days=90), page_size=100)

        assert len(source.calls) == 2


class TestAggregateRange:
    """Test range aggregation across windows."""

    def test_short_range_single_query(self):
        """Test a range within the span limit is fetched with the requested window."""
        source = FakeSource(hourly_records(3))

        records = aggregate_range(source, WINDOW, NO_FILTER, max_span=timedelta(days=90))

        assert len(records) == 3
        assert len(source.calls) == 1
        assert source.calls[0]['window'] == WINDOW

    def test_open_ended_range_not_split(self):
        """Test an open-ended range goes out as one unbounded query."""
        source = FakeSource(hourly_records(3))
        requested = TimeWindow()

        records = aggregate_range(source, requested, NO_FILTER, max_span=timedelta(days=1))

        assert len(records) == 3
        assert len(source.calls) == 1
        assert source.calls[0]['window'] == requested

    def test_half_open_range_not_split(self):
        """Test a range with only a start bound is not segmented."""
        source = FakeSource(hourly_records(3))
        requested = TimeWindow(start=BASE - timedelta(days=400))

        aggregate_range(source, requested, NO_FILTER, max_span=timedelta(days=90))

        assert len(source.calls) == 1

    def test_long_range_fetched_window_by_window(self):
        """Test a 104-day range is fetched as two consecutive windows, in order."""
        start = datetime(2025, 1, 1, tzinfo=timezone.utc)
        end = datetime(2025, 4, 15, tzinfo=timezone.utc)
        early = make_record('PUSER1', datetime(2025, 2, 1, tzinfo=timezone.utc),
                            datetime(2025, 2, 2, tzinfo=timezone.utc))
        late = make_record('PUSER2', datetime(2025, 4, 10, tzinfo=timezone.utc),
                           datetime(2025, 4, 11, tzinfo=timezone.utc))
        source = FakeSource([late, early])

        records = aggregate_range(source, TimeWindow(start=start, end=end), NO_FILTER,
                                  max_span=timedelta(days=90))

        assert records == [early, late]
        windows = [c['window'] for c in source.calls]
        assert windows == [
            TimeWindow(start=start, end=datetime(2025, 4, 1, tzinfo=timezone.utc)),
            TimeWindow(start=datetime(2025, 4, 1, tzinfo=timezone.utc), end=end)
        ]

    def test_each_window_fully_paginated(self):
        """Test pagination of window 1 drains before window 2 starts."""
        start = BASE
        end = BASE + timedelta(days=20)
        records = (
            [make_record('PUSER1', start + timedelta(hours=h), start + timedelta(hours=h + 1)) for h in range(5)]
            + [make_record('PUSER2', start + timedelta(days=15, hours=h),
                           start + timedelta(days=15, hours=h + 1)) for h in range(3)]
        )
        source = FakeSource(records)

        result = aggregate_range(source, TimeWindow(start=start, end=end), NO_FILTER,
                                 max_span=timedelta(days=10), page_size=2)

        assert len(result) == 8
        assert [(c['window'].start, c['offset']) for c in source.calls] == [
            (start, 0), (start, 2), (start, 4),
            (start + timedelta(days=10), 0), (start + timedelta(days=10), 2)
        ]

    def test_chunking_does_not_change_totals(self):
        """Test per-user totals match between a split fetch and a single fetch."""
        start = datetime(2025, 1, 1, tzinfo=timezone.utc)
        end = datetime(2025, 4, 15, tzinfo=timezone.utc)
        records = []
        for day in range(104):
            shift_start = start + timedelta(days=day)
            user_id = ['PUSER1', 'PUSER2', 'PUSER3'][day % 3]
            records.append(make_record(user_id, shift_start, shift_start + timedelta(hours=8 + day % 5)))

        split = aggregate_range(FakeSource(records), TimeWindow(start=start, end=end), NO_FILTER,
                                max_span=timedelta(days=90), page_size=25)
        whole = aggregate_range(FakeSource(records), TimeWindow(start=start, end=end), NO_FILTER,
                                max_span=timedelta(days=365), page_size=25)

        assert len(split) == len(whole) == 104
        assert summarize(split) == summarize(whole)
