"""GitHub API client for issue and issue-event lookups.

Includes rate limiting and retry logic for API resilience.
"""

from src.bountyhook.github.client import (
    GitHubAPI,
    GitHubAPIError,
    GitHubClient,
    RateLimitError,
)
from src.bountyhook.github.models import IssueTimelineEvent

__all__ = [
    "GitHubAPI",
    "GitHubAPIError",
    "GitHubClient",
    "IssueTimelineEvent",
    "RateLimitError",
]
