"""GitHub webhook handling for bounty tracking.

This module verifies and parses GitHub webhook events, specifically:
- issues.labeled - Bounty label added to an issue
- issues.closed - Bounty issue closed
- pull_request.opened / pull_request.closed - Bounty claims

Signature checks live in webhook.signature and routing in webhook.dispatcher;
both depend on packages that import these models, so they are not
re-exported here.
"""

from src.bountyhook.webhook.models import (
    ClaimState,
    EventKind,
    HandlerOutcome,
    IssueAction,
    IssueEvent,
    PullRequestAction,
    PullRequestClaim,
    PullRequestEvent,
)
from src.bountyhook.webhook.references import (
    extract_issue_numbers,
    first_issue_number,
)

__all__ = [
    "ClaimState",
    "EventKind",
    "HandlerOutcome",
    "IssueAction",
    "IssueEvent",
    "PullRequestAction",
    "PullRequestClaim",
    "PullRequestEvent",
    "extract_issue_numbers",
    "first_issue_number",
]
