"""GitHub API client for the lookups the webhook processor needs.

This module provides an async wrapper around the GitHub REST API for:
- Fetching an issue (to check its current labels)
- Fetching an issue's event timeline (to find closing and merge commits)

Includes rate limiting and retry logic for API resilience. Both lookups run
inline with webhook handling, so retry counts and timeouts are expected to
be small.
"""

import asyncio
import logging
import random
import time
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

import httpx


logger = logging.getLogger(__name__)


class GitHubAPIError(Exception):
    """Raised when a GitHub API request fails.

    Attributes:
        message: Human-readable error description.
        status_code: HTTP status code from the response.
        response_body: Response body from GitHub API.
        request_url: The URL that was requested.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        request_url: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        self.request_url = request_url
        super().__init__(message)


class RateLimitError(GitHubAPIError):
    """Raised when GitHub API rate limit is exceeded.

    Attributes:
        reset_at: Unix timestamp when the rate limit resets.
        retry_after: Seconds to wait before retrying.
    """

    def __init__(
        self,
        message: str,
        reset_at: Optional[int] = None,
        retry_after: Optional[int] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.reset_at = reset_at
        self.retry_after = retry_after


@runtime_checkable
class GitHubAPI(Protocol):
    """The two lookups the resolvers depend on."""

    async def get_issue(
        self, owner: str, repo: str, issue_number: int
    ) -> Optional[Dict[str, Any]]:
        ...

    async def get_issue_events(
        self, owner: str, repo: str, issue_number: int
    ) -> List[Dict[str, Any]]:
        ...


class GitHubClient:
    """Async GitHub API client with rate limiting and retry logic.

    Attributes:
        token: GitHub API token (PAT or GitHub App token).
        base_url: Base URL for GitHub API (default: https://api.github.com).
        max_retries: Maximum number of retry attempts for transient failures.
        base_delay: Base delay in seconds for exponential backoff.
        max_delay: Maximum delay in seconds between retries.
        timeout: Request timeout in seconds.
        events_page_size: Page size used when listing issue events.

    Example:
        >>> async with GitHubClient(token="ghp_xxx") as client:
        ...     issue = await client.get_issue("owner", "repo", 42)
    """

    # HTTP status codes that should trigger a retry
    RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}

    # Guard against following Link headers forever
    MAX_EVENT_PAGES = 20

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        max_retries: int = 1,
        base_delay: float = 0.5,
        max_delay: float = 5.0,
        timeout: float = 10.0,
        events_page_size: int = 100,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the GitHub client.

        Args:
            token: GitHub API token for authentication.
            base_url: Base URL for GitHub API. Use this to support
                      GitHub Enterprise Server endpoints.
            max_retries: Maximum number of retry attempts.
            base_delay: Base delay in seconds for exponential backoff.
            max_delay: Maximum delay in seconds between retries.
            timeout: Request timeout in seconds.
            events_page_size: Number of events requested per page.
            transport: Optional httpx transport, used by tests.
        """
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.timeout = timeout
        self.events_page_size = events_page_size
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client, creating it if necessary."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._default_headers(),
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    def _default_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "bountyhook/1.0",
        }

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _calculate_backoff(self, attempt: int) -> float:
        """Calculate backoff delay with full jitter.

        Args:
            attempt: The current retry attempt (0-indexed).

        Returns:
            Delay in seconds before the next retry.
        """
        exponential_delay = self.base_delay * (2 ** attempt)
        capped_delay = min(exponential_delay, self.max_delay)
        return random.uniform(0, capped_delay)

    @staticmethod
    def _parse_int_header(headers: httpx.Headers, name: str) -> Optional[int]:
        value = headers.get(name)
        if value is not None:
            try:
                return int(value)
            except ValueError:
                pass
        return None

    def _rate_limit_error(self, response: httpx.Response) -> RateLimitError:
        """Build a RateLimitError from a rate-limited response."""
        reset_at = self._parse_int_header(response.headers, "x-ratelimit-reset")

        retry_after = None
        if reset_at is not None:
            retry_after = max(0, reset_at - int(time.time()))

        retry_after_header = self._parse_int_header(response.headers, "retry-after")
        if retry_after_header is not None:
            retry_after = retry_after_header

        logger.warning(
            "GitHub API rate limit exceeded",
            extra={"reset_at": reset_at, "retry_after": retry_after},
        )

        return RateLimitError(
            message="GitHub API rate limit exceeded",
            status_code=response.status_code,
            reset_at=reset_at,
            retry_after=retry_after,
            request_url=str(response.url),
        )

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Make an HTTP request with retry logic.

        Args:
            method: HTTP method.
            path: API path or absolute URL (for pagination links).
            params: Optional query parameters.

        Returns:
            The HTTP response from GitHub.

        Raises:
            GitHubAPIError: If the request fails after all retries.
            RateLimitError: If rate limit is exceeded.
        """
        last_exception: Optional[Exception] = None

        for attempt in range(self.max_retries + 1):
            try:
                response = await self.client.request(
                    method=method,
                    url=path,
                    params=params,
                )

                if response.status_code == 403:
                    remaining = self._parse_int_header(
                        response.headers,
                        "x-ratelimit-remaining",
                    )
                    if remaining == 0:
                        raise self._rate_limit_error(response)

                if response.status_code == 429:
                    raise self._rate_limit_error(response)

                if response.status_code in self.RETRYABLE_STATUS_CODES:
                    if attempt < self.max_retries:
                        delay = self._calculate_backoff(attempt)
                        logger.warning(
                            "Retryable error from GitHub API",
                            extra={
                                "status_code": response.status_code,
                                "attempt": attempt + 1,
                                "max_retries": self.max_retries,
                                "delay": delay,
                                "path": path,
                            },
                        )
                        await asyncio.sleep(delay)
                        continue

                if response.status_code >= 400:
                    error_body = response.text
                    logger.error(
                        "GitHub API error",
                        extra={
                            "status_code": response.status_code,
                            "path": path,
                            "method": method,
                            "response_body": error_body[:500],
                        },
                    )
                    raise GitHubAPIError(
                        message=f"GitHub API error: {response.status_code}",
                        status_code=response.status_code,
                        response_body=error_body,
                        request_url=str(response.url),
                    )

                return response

            except GitHubAPIError:
                raise
            except httpx.RequestError as e:
                # Covers timeouts as well as connection failures
                last_exception = e
                if attempt < self.max_retries:
                    delay = self._calculate_backoff(attempt)
                    logger.warning(
                        "Request error, retrying",
                        extra={
                            "error": str(e),
                            "attempt": attempt + 1,
                            "max_retries": self.max_retries,
                            "delay": delay,
                            "path": path,
                        },
                    )
                    await asyncio.sleep(delay)
                    continue

        logger.error(
            "GitHub API request failed after all retries",
            extra={
                "path": path,
                "method": method,
                "max_retries": self.max_retries,
                "last_error": str(last_exception),
            },
        )
        raise GitHubAPIError(
            message=f"Request failed after {self.max_retries} retries: {last_exception}",
            request_url=f"{self.base_url}{path}",
        )

    async def get_issue(
        self,
        owner: str,
        repo: str,
        issue_number: int,
    ) -> Optional[Dict[str, Any]]:
        """Get issue details.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.
            issue_number: Issue number to retrieve.

        Returns:
            Issue data from GitHub API, or None if the issue does not exist.

        Raises:
            GitHubAPIError: If the request fails for any other reason.
        """
        path = f"/repos/{owner}/{repo}/issues/{issue_number}"

        logger.debug(
            "Getting issue details",
            extra={"owner": owner, "repo": repo, "issue_number": issue_number},
        )

        try:
            response = await self._request(method="GET", path=path)
        except GitHubAPIError as e:
            if e.status_code in (404, 410):
                logger.debug(
                    "Issue not found",
                    extra={"owner": owner, "repo": repo, "issue_number": issue_number},
                )
                return None
            raise
        return response.json()

    async def get_issue_events(
        self,
        owner: str,
        repo: str,
        issue_number: int,
    ) -> List[Dict[str, Any]]:
        """List the events of an issue or pull request, oldest first.

        Follows ``Link: rel="next"`` pagination up to MAX_EVENT_PAGES pages.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.
            issue_number: Issue or pull request number.

        Returns:
            Raw event objects from GitHub API.

        Raises:
            GitHubAPIError: If any page request fails.
        """
        path: Optional[str] = f"/repos/{owner}/{repo}/issues/{issue_number}/events"
        params: Optional[Dict[str, Any]] = {"per_page": self.events_page_size}
        events: List[Dict[str, Any]] = []

        for _page in range(self.MAX_EVENT_PAGES):
            if path is None:
                break
            response = await self._request(method="GET", path=path, params=params)
            page = response.json()
            if isinstance(page, list):
                events.extend(page)
            next_link = response.links.get("next")
            path = next_link.get("url") if next_link else None
            # The next URL already carries the query string
            params = None

        logger.debug(
            "Fetched issue events",
            extra={
                "owner": owner,
                "repo": repo,
                "issue_number": issue_number,
                "event_count": len(events),
            },
        )
        return events
