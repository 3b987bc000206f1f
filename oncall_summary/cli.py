"""Command-line entry point: summarize PagerDuty on-call hours per user."""

import argparse
import logging
import sys
from datetime import datetime, time, timezone, tzinfo
from typing import Optional, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import httpx
import pydantic

from .client import PagerDutyClient
from .errors import OnCallSummaryError, SourceQueryError, TimestampParseError
from .fetching import aggregate_range
from .logging_config import configure_logging
from .models import QueryFilter, TimeWindow
from .rendering import render_policies, render_summary
from .settings import Settings, load_settings
from .summary import summarize

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='oncall-summary',
        description='Summarize PagerDuty on-call hours per user over any date range.',
    )
    parser.add_argument('--token', help='PagerDuty API token (defaults to $PAGERDUTY_API_TOKEN)')
    parser.add_argument('--since', metavar='DATE', help='Start date YYYY-MM-DD or ISO-8601 timestamp')
    parser.add_argument('--until', metavar='DATE', help='End date YYYY-MM-DD or ISO-8601 timestamp')
    parser.add_argument('--user', dest='user_ids', metavar='ID', action='append', default=[],
                        help='Filter by user (repeatable)')
    parser.add_argument('--policy', dest='policy_ids', metavar='ID', action='append', default=[],
                        help='Filter by escalation policy (repeatable)')
    parser.add_argument('--earliest', action='store_true', help='Earliest on-call only')
    parser.add_argument('--tz', metavar='ZONE', help='Time zone (e.g. Europe/Amsterdam)')
    parser.add_argument('--list-policies', action='store_true',
                        help='List escalation policy IDs and names')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    return parser


def parse_date_arg(value: Optional[str], zone: tzinfo) -> Optional[datetime]:
    """
    Turn a --since/--until argument into an aware datetime.

    A bare date means midnight in `zone`; a naive timestamp is placed in `zone`;
    an offset-aware timestamp is kept as given.
    """
    if value is None:
        return None
    text = value.strip()
    try:
        if len(text) == 10:
            return datetime.combine(datetime.strptime(text, '%Y-%m-%d').date(), time(), tzinfo=zone)
        parsed = datetime.fromisoformat(text)
    except ValueError as error:
        raise TimestampParseError(value, reason='expected YYYY-MM-DD or an ISO-8601 timestamp') from error
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=zone)
    return parsed


def _report_failure(error: OnCallSummaryError) -> None:
    print(f"❌ {error.stage} failed: {error}", file=sys.stderr)
    if isinstance(error, SourceQueryError) and error.status is not None:
        print(f"Status: {error.status}", file=sys.stderr)
        print(f"Body: {error.body}", file=sys.stderr)


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.Client] = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if settings is None:
        try:
            settings = load_settings()
        except pydantic.ValidationError as error:
            print(f"❌ configuration failed: {error}", file=sys.stderr)
            return 2
    configure_logging(level='DEBUG' if args.verbose else settings.log_level)

    token = args.token or settings.api_token
    if not token:
        print("❌ PagerDuty API token required", file=sys.stderr)
        return 2

    zone: tzinfo = timezone.utc
    if args.tz:
        try:
            zone = ZoneInfo(args.tz)
        except (ZoneInfoNotFoundError, ValueError):
            parser.error(f'unknown time zone: {args.tz}')

    client = PagerDutyClient(
        token=token,
        base_url=settings.api_base_url,
        timeout_seconds=settings.timeout_seconds,
        http_client=http_client,
    )
    with client:
        try:
            if args.list_policies:
                print(render_policies(client.list_policies(time_zone=args.tz)))
                return 0

            requested = TimeWindow(
                start=parse_date_arg(args.since, zone),
                end=parse_date_arg(args.until, zone),
            )
            query_filter = QueryFilter(
                user_ids=frozenset(args.user_ids),
                policy_ids=frozenset(args.policy_ids),
                earliest=args.earliest,
                time_zone=args.tz,
            )
            records = aggregate_range(
                client,
                requested,
                query_filter,
                max_span=settings.max_window,
                page_size=settings.page_size,
            )
            totals = summarize(records)
        except OnCallSummaryError as error:
            logger.debug("Run aborted", exc_info=True)
            _report_failure(error)
            return 1

    print(render_summary(totals))
    return 0


if __name__ == '__main__':
    sys.exit(main())
