"""Unit tests for GitHubClient lookups, retries and pagination."""

import httpx
import pytest

from src.bountyhook.github.client import GitHubAPIError, GitHubClient, RateLimitError
from src.bountyhook.github.models import IssueTimelineEvent
from tests.helpers import run_async


def _client(handler, **kwargs) -> GitHubClient:
    kwargs.setdefault("base_delay", 0.0)
    return GitHubClient(
        token="ghp_test",
        base_url="https://api.github.test",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class TestGetIssue:
    def test_returns_issue(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"number": 42, "labels": []})

        issue = run_async(_client(handler).get_issue("acme", "widgets", 42))

        assert issue == {"number": 42, "labels": []}
        assert seen[0].url.path == "/repos/acme/widgets/issues/42"
        assert seen[0].headers["authorization"] == "Bearer ghp_test"

    def test_not_found_returns_none(self):
        def handler(request):
            return httpx.Response(404, json={"message": "Not Found"})

        assert run_async(_client(handler).get_issue("acme", "widgets", 42)) is None

    def test_server_error_is_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                return httpx.Response(502)
            return httpx.Response(200, json={"number": 42})

        issue = run_async(_client(handler, max_retries=1).get_issue("acme", "widgets", 42))

        assert issue == {"number": 42}
        assert len(calls) == 2

    def test_server_error_after_retries_raises(self):
        def handler(request):
            return httpx.Response(503)

        with pytest.raises(GitHubAPIError) as excinfo:
            run_async(_client(handler, max_retries=1).get_issue("acme", "widgets", 42))

        assert excinfo.value.status_code == 503

    def test_rate_limit_raises(self):
        def handler(request):
            return httpx.Response(
                403,
                headers={"x-ratelimit-remaining": "0", "retry-after": "30"},
            )

        with pytest.raises(RateLimitError) as excinfo:
            run_async(_client(handler).get_issue("acme", "widgets", 42))

        assert excinfo.value.retry_after == 30

    def test_transport_error_raises_after_retries(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(GitHubAPIError):
            run_async(_client(handler, max_retries=2).get_issue("acme", "widgets", 42))

        assert len(calls) == 3


class TestGetIssueEvents:
    def test_follows_pagination(self):
        def handler(request):
            if request.url.params.get("page") == "2":
                return httpx.Response(200, json=[{"event": "merged"}])
            return httpx.Response(
                200,
                json=[{"event": "referenced"}],
                headers={
                    "link": '<https://api.github.test/repos/acme/widgets/issues/12/events?per_page=100&page=2>; rel="next"'
                },
            )

        events = run_async(_client(handler).get_issue_events("acme", "widgets", 12))

        assert [e["event"] for e in events] == ["referenced", "merged"]

    def test_requests_large_pages(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[])

        run_async(_client(handler).get_issue_events("acme", "widgets", 12))

        assert seen[0].url.params["per_page"] == "100"


class TestIssueTimelineEvent:
    def test_from_github_response(self):
        event = IssueTimelineEvent.from_github_response(
            {"event": "merged", "actor": {"login": "acme"}, "commit_id": "abc"}
        )
        assert event == IssueTimelineEvent(event="merged", actor_login="acme", commit_id="abc")

    def test_null_actor(self):
        event = IssueTimelineEvent.from_github_response({"event": "closed", "actor": None})
        assert event.actor_login is None
        assert event.commit_id is None
