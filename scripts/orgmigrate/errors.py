"""Exceptions raised by the API client and pagination helpers."""

from __future__ import annotations

from typing import Any

import requests


class MigrationError(RuntimeError):
    """Base class for fatal migration errors."""


class PagingExhausted(MigrationError):
    """Raised when a fetch hits its page ceiling before pagination completes."""

    def __init__(self, url: str, max_pages: int) -> None:
        super().__init__(f"Page limit of {max_pages} reached while fetching {url}")
        self.url = url
        self.max_pages = max_pages


class RateLimitExceeded(MigrationError):
    """GitHub kept answering with a rate-limit response after every retry."""

    def __init__(self, url: str, attempts: int) -> None:
        super().__init__(f"GitHub rate limit exceeded after {attempts} retries: {url}")
        self.url = url
        self.attempts = attempts


class QueryError(MigrationError):
    """GraphQL endpoint answered with an application-level error list."""

    def __init__(self, errors: Any) -> None:
        super().__init__(f"GraphQL query failed: {errors}")
        self.errors = errors


class PageableFieldNotFound(MigrationError):
    """No list-valued field sits next to the discovered pageInfo."""

    def __init__(self, path: tuple[str, ...]) -> None:
        super().__init__(
            "No pageable list field found at " + (".".join(path) or "<root>")
        )
        self.path = path


class NotFound(requests.HTTPError):
    """HTTP 404."""


class BadRequest(requests.HTTPError):
    """HTTP 400."""
