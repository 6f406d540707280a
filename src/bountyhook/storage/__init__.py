"""Persistence collaborators for the webhook processor.

The processor calls into these protocols and never touches a database
directly. In-memory implementations are provided for local development.
"""

from src.bountyhook.storage.base import (
    BountyService,
    IssueStore,
    PullRequestStore,
    RepositoryRecord,
    RepositoryStore,
    User,
    UserStore,
)
from src.bountyhook.storage.memory import (
    InMemoryBountyService,
    InMemoryIssueStore,
    InMemoryPullRequestStore,
    InMemoryRepositoryStore,
    InMemoryUserStore,
)

__all__ = [
    # Protocols
    "BountyService",
    "IssueStore",
    "PullRequestStore",
    "RepositoryStore",
    "UserStore",
    # Records
    "RepositoryRecord",
    "User",
    # In-memory implementations
    "InMemoryBountyService",
    "InMemoryIssueStore",
    "InMemoryPullRequestStore",
    "InMemoryRepositoryStore",
    "InMemoryUserStore",
]
