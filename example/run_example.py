#!/usr/bin/env python3
"""
Simple example demonstrating windowed on-call aggregation.
Runs against an in-memory source so no PagerDuty account is needed.
"""

from datetime import datetime, timedelta, timezone
import sys
import os

# Add parent directory to path so we can import oncall_summary
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from oncall_summary import OnCallPage, OnCallRecord, QueryFilter, TimeWindow, aggregate_range, summarize
from oncall_summary.rendering import render_summary


class WeeklyRotationSource:
    """Alice, Bob and Charlie rotating weekly, served `limit` records per page."""

    users = [('PALICE1', 'Alice'), ('PBOB002', 'Bob'), ('PCHARL3', 'Charlie')]

    def __init__(self, handover_start_at: datetime):
        self.handover_start_at = handover_start_at
        self.requests = 0

    def fetch_oncalls_page(self, *, window, query_filter, limit, offset):
        self.requests += 1
        shifts = []
        shift_start = self.handover_start_at
        index = 0
        while shift_start < window.end:
            shift_end = shift_start + timedelta(days=7)
            if shift_end > window.start:
                user_id, name = self.users[index % len(self.users)]
                shifts.append(OnCallRecord(
                    start=max(shift_start, window.start).isoformat(),
                    end=min(shift_end, window.end).isoformat(),
                    user={'id': user_id, 'summary': name}
                ))
            shift_start = shift_end
            index += 1
        return OnCallPage(oncalls=shifts[offset:offset + limit], total=len(shifts))


def main():
    # Starting Friday Nov 7, 2025 at 5pm
    handover_start_at = datetime(2025, 11, 7, 17, 0, tzinfo=timezone.utc)
    source = WeeklyRotationSource(handover_start_at)

    # Half a year: more than PagerDuty's 90-day limit per query
    since = handover_start_at
    until = since + timedelta(days=182)

    print(f"Summarizing on-call from {since.strftime('%Y-%m-%d')} to {until.strftime('%Y-%m-%d')}...")

    records = aggregate_range(
        source,
        TimeWindow(start=since, end=until),
        QueryFilter(),
        max_span=timedelta(days=90),
        page_size=5
    )

    print(f"{len(records)} records in {source.requests} requests")
    print(render_summary(summarize(records)))


if __name__ == '__main__':
    main()
