"""PagerDuty REST adapter for on-call and escalation policy reads."""

import logging
from typing import Any, Optional

import httpx
import pydantic

from .errors import SourceQueryError
from .models import EscalationPolicy, OnCallPage, QueryFilter, TimeWindow

logger = logging.getLogger(__name__)

API_VERSION = 'application/vnd.pagerduty+json;version=2'
DEFAULT_API_BASE = 'https://api.pagerduty.com'
POLICY_LIST_LIMIT = 100
_MAX_ERROR_BODY = 500


def build_headers(token: str) -> dict[str, str]:
    return {
        'Accept': API_VERSION,
        'Content-Type': 'application/json',
        'Authorization': f'Token token={token}',
    }


def build_oncall_params(
    window: TimeWindow,
    query_filter: QueryFilter,
    *,
    limit: int,
    offset: int,
) -> dict[str, Any]:
    """Query string for GET /oncalls. Ids are sorted so requests are reproducible."""
    params: dict[str, Any] = {
        'limit': limit,
        'total': True,
        'earliest': query_filter.earliest,
        'offset': offset,
    }
    if window.start is not None:
        params['since'] = window.start.isoformat()
    if window.end is not None:
        params['until'] = window.end.isoformat()
    if query_filter.time_zone:
        params['time_zone'] = query_filter.time_zone
    if query_filter.user_ids:
        params['user_ids[]'] = sorted(query_filter.user_ids)
    if query_filter.policy_ids:
        params['escalation_policy_ids[]'] = sorted(query_filter.policy_ids)
    return params


class PagerDutyClient:
    """Synchronous PagerDuty API client; one request in flight at a time."""

    def __init__(
        self,
        *,
        token: str,
        base_url: str = DEFAULT_API_BASE,
        timeout_seconds: float = 30.0,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self._base_url = base_url.rstrip('/')
        self._headers = build_headers(token)
        self._http = http_client or httpx.Client(timeout=timeout_seconds)

    def __enter__(self) -> 'PagerDutyClient':
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def fetch_oncalls_page(
        self,
        *,
        window: TimeWindow,
        query_filter: QueryFilter,
        limit: int,
        offset: int,
    ) -> OnCallPage:
        params = build_oncall_params(window, query_filter, limit=limit, offset=offset)
        payload = self._get_json('oncalls', '/oncalls', params)
        try:
            return OnCallPage.model_validate(payload)
        except pydantic.ValidationError as error:
            raise SourceQueryError(None, f'unexpected payload shape: {error}', operation='oncalls') from error

    def list_policies(self, *, time_zone: Optional[str] = None) -> list[EscalationPolicy]:
        """Read the first page of escalation policies. Not paginated."""
        params: dict[str, Any] = {'limit': POLICY_LIST_LIMIT, 'total': True}
        if time_zone:
            params['time_zone'] = time_zone
        payload = self._get_json('escalation_policies', '/escalation_policies', params)
        try:
            return [EscalationPolicy.model_validate(p) for p in payload.get('escalation_policies') or []]
        except pydantic.ValidationError as error:
            raise SourceQueryError(
                None, f'unexpected payload shape: {error}', operation='escalation_policies'
            ) from error

    def _get_json(self, operation: str, path: str, params: dict[str, Any]) -> dict[str, Any]:
        url = f'{self._base_url}{path}'
        logger.debug("GET %s offset=%s", url, params.get('offset'))
        try:
            response = self._http.get(url, headers=self._headers, params=params)
        except httpx.HTTPError as error:
            raise SourceQueryError(None, f'transport failure: {error}', operation=operation) from error

        if response.status_code != 200:
            raise SourceQueryError(
                response.status_code,
                _error_body(response),
                operation=operation,
            )

        try:
            payload = response.json()
        except ValueError as error:
            raise SourceQueryError(response.status_code, 'invalid JSON payload', operation=operation) from error
        if not isinstance(payload, dict):
            raise SourceQueryError(response.status_code, 'non-object JSON payload', operation=operation)
        return payload


def _error_body(response: httpx.Response) -> str:
    text = response.text
    if not text:
        return 'empty response body'
    return text[:_MAX_ERROR_BODY]
