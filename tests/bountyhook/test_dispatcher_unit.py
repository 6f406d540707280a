"""Unit tests for event dispatch by kind and action."""

from unittest.mock import AsyncMock

import pytest

from src.bountyhook.webhook.dispatcher import EventDispatcher
from src.bountyhook.webhook.models import (
    EventKind,
    HandlerOutcome,
    IssueEvent,
    PullRequestEvent,
)
from tests.helpers import make_issue_payload, make_pull_request_payload, run_async


@pytest.fixture
def handlers():
    issue_handler = AsyncMock()
    issue_handler.handle.return_value = HandlerOutcome.PROCESSED
    pr_handler = AsyncMock()
    pr_handler.handle.return_value = HandlerOutcome.PROCESSED
    return issue_handler, pr_handler


class TestEventKind:
    def test_known_kinds(self):
        assert EventKind.parse("issues") is EventKind.ISSUES
        assert EventKind.parse("pull_request") is EventKind.PULL_REQUEST

    def test_unknown_kinds(self):
        assert EventKind.parse("push") is None
        assert EventKind.parse(None) is None


class TestEventDispatcher:
    def test_issues_event_routed_to_issue_handler(self, handlers):
        issue_handler, pr_handler = handlers
        dispatcher = EventDispatcher(issue_handler, pr_handler)

        result = run_async(dispatcher.dispatch("issues", make_issue_payload()))

        assert result.event == "issues"
        assert result.status is HandlerOutcome.PROCESSED
        event = issue_handler.handle.await_args.args[0]
        assert isinstance(event, IssueEvent)
        assert event.issue.number == 42
        pr_handler.handle.assert_not_awaited()

    def test_pull_request_event_routed_to_pr_handler(self, handlers):
        issue_handler, pr_handler = handlers
        dispatcher = EventDispatcher(issue_handler, pr_handler)

        result = run_async(
            dispatcher.dispatch("pull_request", make_pull_request_payload())
        )

        assert result.status is HandlerOutcome.PROCESSED
        event = pr_handler.handle.await_args.args[0]
        assert isinstance(event, PullRequestEvent)
        assert event.pull_request.number == 12
        issue_handler.handle.assert_not_awaited()

    @pytest.mark.parametrize("event_name", ["push", "ping", "", None])
    def test_unhandled_kinds_are_ignored(self, handlers, event_name):
        issue_handler, pr_handler = handlers
        dispatcher = EventDispatcher(issue_handler, pr_handler)

        result = run_async(dispatcher.dispatch(event_name, {"zen": "Keep it simple"}))

        assert result.status is HandlerOutcome.IGNORED
        issue_handler.handle.assert_not_awaited()
        pr_handler.handle.assert_not_awaited()

    def test_malformed_payload_is_ignored(self, handlers):
        issue_handler, pr_handler = handlers
        dispatcher = EventDispatcher(issue_handler, pr_handler)

        result = run_async(dispatcher.dispatch("pull_request", {"action": "opened"}))

        assert result.status is HandlerOutcome.IGNORED
        pr_handler.handle.assert_not_awaited()

    def test_handler_failure_is_acknowledged(self, handlers):
        issue_handler, pr_handler = handlers
        pr_handler.handle.side_effect = RuntimeError("database unavailable")
        dispatcher = EventDispatcher(issue_handler, pr_handler)

        result = run_async(
            dispatcher.dispatch("pull_request", make_pull_request_payload())
        )

        assert result.event == "pull_request"
        assert result.status is HandlerOutcome.ERROR
