"""Bounty issue and commit resolution."""

from src.bountyhook.bounty.commits import (
    ISSUE_CLOSE_EVENT_TYPES,
    PULL_REQUEST_MERGE_EVENT_TYPES,
    CommitResolver,
    find_issue_event,
)
from src.bountyhook.bounty.resolver import BountyIssueResolver, issue_has_label

__all__ = [
    "BountyIssueResolver",
    "CommitResolver",
    "ISSUE_CLOSE_EVENT_TYPES",
    "PULL_REQUEST_MERGE_EVENT_TYPES",
    "find_issue_event",
    "issue_has_label",
]
