"""Persistence collaborator protocols.

The webhook processor does not own any durable state. Repository secrets,
bounties, issues, claims and users all live behind the protocols below,
which production deployments implement against their own database. The
implementations are responsible for their own concurrency control (e.g.
upserting claims keyed by pull request id).
"""

from typing import Any, Dict, Optional, Protocol, runtime_checkable

from pydantic import BaseModel

from src.bountyhook.webhook.models import Issue, PullRequestClaim


class RepositoryRecord(BaseModel):
    """Stored repository settings.

    Attributes:
        full_name: Repository path in format "{owner}/{name}".
        hook_secret: Shared secret configured on the repository webhook.
    """

    full_name: str
    hook_secret: Optional[str] = None


class User(BaseModel):
    """Stored GitHub user."""

    id: int
    login: str
    name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    extra: Optional[Dict[str, Any]] = None


@runtime_checkable
class RepositoryStore(Protocol):
    """Lookup of per-repository webhook secrets."""

    async def get_repo(self, full_name: str) -> Optional[RepositoryRecord]:
        """Return the repository record, or None if it is not tracked."""
        ...


@runtime_checkable
class BountyService(Protocol):
    """Bounty domain collaborator."""

    async def add_bounty_for_issue(
        self,
        repo_name: str,
        repo_id: int,
        owner_login: str,
        issue: Issue,
    ) -> None:
        """Create a bounty for a newly labeled issue."""
        ...


@runtime_checkable
class IssueStore(Protocol):
    async def close(self, commit_id: str, issue_id: int) -> None:
        """Record the commit that closed a bounty issue."""
        ...


@runtime_checkable
class PullRequestStore(Protocol):
    async def save(self, claim: PullRequestClaim) -> None:
        """Insert or update the claim for ``claim.pr_id``."""
        ...


@runtime_checkable
class UserStore(Protocol):
    async def create_user(
        self,
        id: int,
        login: str,
        name: Optional[str],
        email: Optional[str],
        avatar_url: Optional[str],
        extra: Optional[Dict[str, Any]],
    ) -> User:
        """Create the user if absent; idempotent otherwise."""
        ...
