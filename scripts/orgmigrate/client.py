"""GitHub REST + GraphQL client scoped to a single organisation.

Both fetchers assemble complete result sets from paginated responses:
REST follows ``Link`` headers, GraphQL follows the cursor of the first
connection in the response.
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Optional, Union

import requests

from scripts.orgmigrate.config import MigrationConfig, OrgConfig
from scripts.orgmigrate.errors import (
    BadRequest,
    NotFound,
    PagingExhausted,
    QueryError,
    RateLimitExceeded,
)
from scripts.orgmigrate.pagination import (
    find_page_info_path,
    merge_connection,
    merge_rest_pages,
    page_info_at,
)
from scripts.orgmigrate.queries import GraphQuery
from scripts.orgmigrate.rate_limiter import RateLimiter

logger = logging.getLogger("orgmigrate.client")

MUTATING_METHODS = frozenset({"PATCH", "PUT", "POST"})
RATE_LIMIT_RETRIES = 5
MAX_RATE_LIMIT_WAIT_S = 300


def _is_rate_limited(resp: requests.Response) -> bool:
    if resp.status_code == 429:
        return True
    return resp.status_code == 403 and "rate limit" in resp.text.lower()


def _rate_limit_wait(resp: requests.Response) -> int:
    """Seconds to wait: Retry-After if given, else until X-RateLimit-Reset."""
    retry_after = resp.headers.get("Retry-After")
    if retry_after and retry_after.isdigit():
        wait = int(retry_after)
    else:
        reset = int(resp.headers.get("X-RateLimit-Reset", "0"))
        wait = reset - int(time.time())
    return min(max(wait, 1), MAX_RATE_LIMIT_WAIT_S)


class DebugCapture:
    """Writes every raw response to a sequentially numbered JSON file."""

    def __init__(self, directory: str, prefix: str) -> None:
        self._dir = Path(directory)
        self._dir.mkdir(parents=True, exist_ok=True)
        self._prefix = prefix
        self._seq = 0

    def write(self, kind: str, url: str, payload: Any) -> Path:
        self._seq += 1
        path = self._dir / f"{self._prefix}-{self._seq:05d}-{kind}.json"
        path.write_text(
            json.dumps({"url": url, "response": payload}, indent=2),
            encoding="utf-8",
        )
        return path


class GitHubClient:
    def __init__(
        self,
        org: OrgConfig,
        limiter: Optional[RateLimiter] = None,
        rest_max_pages: int = 100,
        graph_max_pages: int = 500,
        timeout_s: float = 60.0,
        debug_capture: Optional[DebugCapture] = None,
    ) -> None:
        self.org = org.org
        self._base = org.api_base_url.rstrip("/")
        self._graphql_url = org.graphql_url
        self._limiter = limiter or RateLimiter()
        self.rest_max_pages = rest_max_pages
        self.graph_max_pages = graph_max_pages
        self._timeout = timeout_s
        self._capture = debug_capture
        self._session = requests.Session()
        self._session.headers.update({
            "Authorization": f"Bearer {org.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        })

    @classmethod
    def from_config(
        cls,
        config: MigrationConfig,
        side: str,
        limiter: RateLimiter,
    ) -> "GitHubClient":
        org = config.require(side)
        capture = None
        if config.debug_capture_dir:
            capture = DebugCapture(config.debug_capture_dir, f"{side}-{org.org}")
        return cls(
            org,
            limiter=limiter,
            rest_max_pages=config.rest_max_pages,
            graph_max_pages=config.graph_max_pages,
            timeout_s=config.http_timeout_s,
            debug_capture=capture,
        )

    def url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._base}/{path.lstrip('/')}"

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _send(self, method: str, url: str, body: Any = None) -> requests.Response:
        attempt = 0
        while True:
            logger.debug("%s %s", method, url, extra={"org": self.org})
            resp = self._session.request(method, url, json=body, timeout=self._timeout)
            if not _is_rate_limited(resp):
                break
            attempt += 1
            if attempt > RATE_LIMIT_RETRIES:
                raise RateLimitExceeded(url, RATE_LIMIT_RETRIES)
            wait = _rate_limit_wait(resp)
            logger.warning("GitHub rate limit hit, waiting %ds", wait, extra={"org": self.org})
            time.sleep(wait)

        if resp.status_code == 404:
            raise NotFound(f"404 Not Found: {method} {url}", response=resp)
        if resp.status_code == 400:
            raise BadRequest(f"400 Bad Request: {method} {url}: {resp.text}", response=resp)
        resp.raise_for_status()
        return resp

    @staticmethod
    def _parse(resp: requests.Response) -> Any:
        if not resp.content:
            return None
        return resp.json()

    def _record(self, kind: str, url: str, payload: Any) -> None:
        if self._capture is not None:
            path = self._capture.write(kind, url, payload)
            logger.debug("Captured response to %s", path)

    # ------------------------------------------------------------------
    # REST
    # ------------------------------------------------------------------

    def rest(
        self,
        url: str,
        method: str = "GET",
        body: Any = None,
        max_pages: Optional[int] = None,
    ) -> Any:
        """Fetch a REST resource, following rel="next" links.

        Raises PagingExhausted when more pages remain than max_pages allows.
        """
        if max_pages is None:
            max_pages = self.rest_max_pages
        url = self.url(url)
        return self._rest_page(url, method.upper(), body, max_pages, url, max_pages)

    def _rest_page(
        self,
        url: str,
        method: str,
        body: Any,
        remaining: int,
        first_url: str,
        max_pages: int,
    ) -> Any:
        if remaining <= 0:
            raise PagingExhausted(first_url, max_pages)
        if method in MUTATING_METHODS:
            self._limiter.throttle()

        resp = self._send(method, url, body)
        result = self._parse(resp)
        self._record("rest", url, result)

        next_url = resp.links.get("next", {}).get("url")
        last_url = resp.links.get("last", {}).get("url")
        if last_url and last_url != url and next_url and next_url != url:
            nested = self._rest_page(next_url, method, body, remaining - 1, first_url, max_pages)
            result = merge_rest_pages(result, nested)
        return result

    # ------------------------------------------------------------------
    # GraphQL
    # ------------------------------------------------------------------

    def _graphql_page(self, text: str, variables: dict, name: str) -> dict:
        resp = self._send("POST", self._graphql_url, {"query": text, "variables": variables})
        body = self._parse(resp) or {}
        self._record(f"graphql-{name}", self._graphql_url, body)
        if body.get("errors"):
            raise QueryError(body["errors"])
        return body

    def graphql(
        self,
        query: Union[GraphQuery, str],
        variables: Optional[dict] = None,
        paginate: bool = True,
        max_pages: Optional[int] = None,
    ) -> dict:
        """Run a query and, when paginating, merge every page of its connection.

        Follow-up pages reuse the original variables with ``endCursor`` set.
        """
        if isinstance(query, GraphQuery):
            text, path, name = query.text, query.connection_path, query.name
        else:
            text, path, name = query, None, "query"
        variables = dict(variables or {})

        result = self._graphql_page(text, variables, name)
        if not paginate:
            return result

        if path is None or page_info_at(result, path) is None:
            path = find_page_info_path(result)
        if path is None:
            logger.debug("No pageInfo in %s response, single page", name)
            return result

        if max_pages is None:
            max_pages = self.graph_max_pages
        pages = 1
        page_info = page_info_at(result, path)
        while page_info and page_info.get("hasNextPage"):
            if pages >= max_pages:
                raise PagingExhausted(f"{self._graphql_url} ({name})", max_pages)
            next_vars = {**variables, "endCursor": page_info.get("endCursor")}
            next_page = self._graphql_page(text, next_vars, name)
            pages += 1
            result = merge_connection(result, next_page, path)
            page_info = page_info_at(result, path)

        logger.debug("Fetched %d page(s) for %s", pages, name, extra={"org": self.org})
        return result
