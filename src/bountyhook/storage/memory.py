"""In-memory collaborator implementations for local development.

These satisfy the protocols in storage/base.py and are wired by the app
when no database-backed implementation is configured. They are also the
stores used by the endpoint tests.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from src.bountyhook.storage.base import RepositoryRecord, User
from src.bountyhook.webhook.models import Issue, PullRequestClaim


logger = logging.getLogger(__name__)


class InMemoryRepositoryStore:
    """Repository secrets keyed by full name."""

    def __init__(self, secrets: Optional[Dict[str, str]] = None):
        self._repos: Dict[str, RepositoryRecord] = {}
        for full_name, secret in (secrets or {}).items():
            self.add(full_name, secret)

    def add(self, full_name: str, hook_secret: str) -> None:
        self._repos[full_name] = RepositoryRecord(
            full_name=full_name,
            hook_secret=hook_secret,
        )

    async def get_repo(self, full_name: str) -> Optional[RepositoryRecord]:
        return self._repos.get(full_name)


class InMemoryBountyService:
    """Records bounties as (repo_id, issue number) pairs."""

    def __init__(self):
        self.bounties: Dict[Tuple[int, int], Dict[str, Any]] = {}

    async def add_bounty_for_issue(
        self,
        repo_name: str,
        repo_id: int,
        owner_login: str,
        issue: Issue,
    ) -> None:
        self.bounties[(repo_id, issue.number)] = {
            "repo": repo_name,
            "login": owner_login,
            "repo_id": repo_id,
            "issue_id": issue.id,
            "issue_number": issue.number,
        }
        logger.info(
            "Bounty added for issue",
            extra={
                "repo": repo_name,
                "owner": owner_login,
                "issue_number": issue.number,
            },
        )


class InMemoryIssueStore:
    def __init__(self):
        self.closed: Dict[int, str] = {}

    async def close(self, commit_id: str, issue_id: int) -> None:
        self.closed[issue_id] = commit_id


class InMemoryPullRequestStore:
    """Claims upserted by pull request id.

    Re-processing the same event overwrites the row with an identical one,
    so duplicate deliveries are harmless.
    """

    def __init__(self):
        self.claims: Dict[int, PullRequestClaim] = {}
        self.history: List[PullRequestClaim] = []

    async def save(self, claim: PullRequestClaim) -> None:
        self.claims[claim.pr_id] = claim
        self.history.append(claim)

    def get(self, pr_id: int) -> Optional[PullRequestClaim]:
        return self.claims.get(pr_id)


class InMemoryUserStore:
    def __init__(self):
        self.users: Dict[int, User] = {}

    async def create_user(
        self,
        id: int,
        login: str,
        name: Optional[str],
        email: Optional[str],
        avatar_url: Optional[str],
        extra: Optional[Dict[str, Any]],
    ) -> User:
        existing = self.users.get(id)
        if existing is not None:
            return existing
        user = User(
            id=id,
            login=login,
            name=name,
            email=email,
            avatar_url=avatar_url,
            extra=extra,
        )
        self.users[id] = user
        return user
