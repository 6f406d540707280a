"""Handling of ``issues`` webhook events.

Two issue actions have bounty side effects:
- labeled: the bounty label was applied, so a bounty is created.
- closed: a bounty issue was closed; the closing commit is looked up in the
  background and recorded against the issue.

Issues closed without a commit reference (e.g. from the GitHub web UI) have
no "referenced" or "closed" event carrying a commit id and are not detected.
"""

import logging
from typing import Optional

from src.bountyhook.bounty.commits import ISSUE_CLOSE_EVENT_TYPES, CommitResolver
from src.bountyhook.bounty.resolver import BountyIssueResolver
from src.bountyhook.storage.base import BountyService, IssueStore
from src.bountyhook.tasks import BackgroundTaskRunner
from src.bountyhook.webhook.models import HandlerOutcome, IssueAction, IssueEvent


logger = logging.getLogger(__name__)


class IssueHandler:
    """Reacts to bounty label and issue close actions.

    Attributes:
        bounties: Bounty domain collaborator.
        issues: Issue persistence collaborator.
        bounty_resolver: Provides the bounty label check.
        commit_resolver: Finds the commit that closed an issue.
        tasks: Runner for the deferred commit search.
    """

    def __init__(
        self,
        bounties: BountyService,
        issues: IssueStore,
        bounty_resolver: BountyIssueResolver,
        commit_resolver: CommitResolver,
        tasks: BackgroundTaskRunner,
    ):
        self.bounties = bounties
        self.issues = issues
        self.bounty_resolver = bounty_resolver
        self.commit_resolver = commit_resolver
        self.tasks = tasks

    def labeled_as_bounty(self, event: IssueEvent) -> bool:
        """Check whether the label just applied is the bounty label."""
        label = event.label
        return (
            event.action == IssueAction.LABELED.value
            and label is not None
            and label.name == self.bounty_resolver.bounty_label
        )

    def closed_bounty_issue(self, event: IssueEvent) -> bool:
        return (
            event.action == IssueAction.CLOSED.value
            and self.bounty_resolver.has_bounty_label(event.issue)
        )

    async def handle(self, event: IssueEvent) -> HandlerOutcome:
        """Apply the side effects of an issue event.

        The labeled and closed checks are independent of each other.

        Args:
            event: The parsed issues event.

        Returns:
            PROCESSED if any side effect was started, IGNORED otherwise.
        """
        logger.debug(
            "Handling issue event",
            extra={"action": event.action, "issue": event.issue_ref},
        )
        outcome = HandlerOutcome.IGNORED

        if self.labeled_as_bounty(event):
            await self.handle_labeled(event)
            outcome = HandlerOutcome.PROCESSED

        if self.closed_bounty_issue(event):
            self.handle_closed(event)
            outcome = HandlerOutcome.PROCESSED

        return outcome

    async def handle_labeled(self, event: IssueEvent) -> None:
        repository = event.repository
        logger.info(
            "Bounty label added to issue",
            extra={
                "owner": repository.owner.login,
                "repo": repository.name,
                "issue_number": event.issue.number,
            },
        )
        await self.bounties.add_bounty_for_issue(
            repository.name,
            repository.id,
            repository.owner.login,
            event.issue,
        )

    def handle_closed(self, event: IssueEvent) -> None:
        """Submit the closing-commit search without waiting for it."""
        repository = event.repository
        self.tasks.submit(
            self.record_closing_commit(
                repository.owner.login,
                repository.name,
                event.issue.number,
                event.issue.id,
            ),
            name=f"close-issue:{event.issue_ref}",
            context={
                "owner": repository.owner.login,
                "repo": repository.name,
                "issue_number": event.issue.number,
            },
        )

    async def record_closing_commit(
        self,
        owner: str,
        repo: str,
        issue_number: int,
        issue_id: int,
    ) -> Optional[str]:
        """Find the commit that closed a bounty issue and record it.

        Returns:
            The commit id recorded, or None if no commit was found.
        """
        commit_id = await self.commit_resolver.find_commit_id(
            owner,
            repo,
            issue_number,
            ISSUE_CLOSE_EVENT_TYPES,
        )
        if commit_id is None:
            logger.info(
                "No closing commit found for bounty issue",
                extra={"owner": owner, "repo": repo, "issue_number": issue_number},
            )
            return None

        logger.info(
            "Bounty issue closed with commit",
            extra={
                "owner": owner,
                "repo": repo,
                "issue_number": issue_number,
                "commit_id": commit_id,
            },
        )
        await self.issues.close(commit_id, issue_id)
        return commit_id
