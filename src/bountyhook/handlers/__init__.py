"""Handlers for the webhook event kinds with bounty side effects."""

from src.bountyhook.handlers.issues import IssueHandler
from src.bountyhook.handlers.pull_requests import PullRequestHandler, next_claim_state

__all__ = [
    "IssueHandler",
    "PullRequestHandler",
    "next_claim_state",
]
