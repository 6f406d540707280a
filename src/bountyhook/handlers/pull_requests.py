"""Bounty claim state machine for ``pull_request`` webhook events.

When a PR is opened, it is only considered a claim if it references an
existing bounty issue. When it is closed, the claim is accepted if a merge
commit is found on its timeline and abandoned otherwise.

State Flow:
    no claim --opened--> opened
    opened --closed, merge commit found--> merged
    opened --closed, no merge commit--> closed

The target state is computed from the current event alone. Duplicate or
out-of-order deliveries are reconciled by the PullRequestStore upsert.
"""

import logging
from typing import Optional

from src.bountyhook.bounty.commits import (
    PULL_REQUEST_MERGE_EVENT_TYPES,
    CommitResolver,
)
from src.bountyhook.bounty.resolver import BountyIssueResolver
from src.bountyhook.metrics import WebhookMetrics
from src.bountyhook.storage.base import PullRequestStore, UserStore
from src.bountyhook.webhook.models import (
    ClaimState,
    HandlerOutcome,
    PullRequestAction,
    PullRequestClaim,
    PullRequestEvent,
)
from src.bountyhook.webhook.references import first_issue_number


logger = logging.getLogger(__name__)


def next_claim_state(
    action: PullRequestAction,
    merge_commit_id: Optional[str] = None,
) -> ClaimState:
    """Compute the claim state for a PR action.

    Args:
        action: The pull request action being processed.
        merge_commit_id: Merge commit found on the timeline (closed only).

    Returns:
        OPENED for opened; MERGED or CLOSED for closed depending on whether
        a merge commit was found.
    """
    if action is PullRequestAction.OPENED:
        return ClaimState.OPENED
    if merge_commit_id:
        return ClaimState.MERGED
    return ClaimState.CLOSED


class PullRequestHandler:
    """Decides whether a PR event creates or resolves a bounty claim.

    Attributes:
        bounty_resolver: Confirms the referenced issue is a bounty issue.
        commit_resolver: Finds the merge commit of a closed PR.
        pull_requests: Claim persistence collaborator.
        users: User persistence collaborator.
        metrics: Optional metrics sink for saved claims.
    """

    def __init__(
        self,
        bounty_resolver: BountyIssueResolver,
        commit_resolver: CommitResolver,
        pull_requests: PullRequestStore,
        users: UserStore,
        metrics: Optional[WebhookMetrics] = None,
    ):
        self.bounty_resolver = bounty_resolver
        self.commit_resolver = commit_resolver
        self.pull_requests = pull_requests
        self.users = users
        self.metrics = metrics

    @staticmethod
    def _parse_action(action: str) -> Optional[PullRequestAction]:
        try:
            return PullRequestAction(action)
        except ValueError:
            return None

    async def handle(self, event: PullRequestEvent) -> HandlerOutcome:
        """Run the claim state machine for one pull request event.

        Only the first issue reference is considered; if it does not resolve
        to a bounty issue, later references are not tried.

        Args:
            event: The parsed pull_request event.

        Returns:
            PROCESSED if a claim was saved, IGNORED otherwise.
        """
        action = self._parse_action(event.action)
        if action is None:
            logger.debug(
                "Ignoring pull request action",
                extra={"action": event.action, "pull_request": event.pr_ref},
            )
            return HandlerOutcome.IGNORED

        repository = event.repository
        owner = repository.owner.login
        repo = repository.name
        pr = event.pull_request

        candidate = first_issue_number(pr.body, pr.title)
        if candidate is None:
            logger.debug(
                "Pull request references no issue",
                extra={"action": action.value, "pull_request": event.pr_ref},
            )
            return HandlerOutcome.IGNORED

        issue_number = await self.bounty_resolver.resolve(owner, repo, candidate)
        if issue_number is None:
            logger.info(
                "Pull request does not reference a bounty issue",
                extra={
                    "owner": owner,
                    "repo": repo,
                    "pr_number": pr.number,
                    "issue_number": candidate,
                    "action": action.value,
                },
            )
            return HandlerOutcome.IGNORED

        logger.debug(
            "Referenced bounty issue found",
            extra={"pull_request": event.pr_ref, "issue_number": issue_number},
        )

        await self.users.create_user(
            pr.user.id,
            pr.user.login,
            pr.user.name,
            None,
            pr.user.avatar_url,
            None,
        )

        commit_id: Optional[str] = None
        if action is PullRequestAction.CLOSED:
            commit_id = await self.commit_resolver.find_commit_id(
                owner,
                repo,
                pr.number,
                PULL_REQUEST_MERGE_EVENT_TYPES,
            )
        state = next_claim_state(action, commit_id)

        claim = PullRequestClaim(
            repo_id=repository.id,
            pr_id=pr.id,
            pr_number=pr.number,
            user_id=pr.user.id,
            issue_number=issue_number,
            state=state,
            commit_id=commit_id if state is ClaimState.MERGED else None,
        )
        await self.pull_requests.save(claim)

        logger.info(
            "PR with reference to bounty issue %s",
            state.value,
            extra={
                "owner": owner,
                "repo": repo,
                "pr_number": pr.number,
                "issue_number": issue_number,
                "commit_id": claim.commit_id,
            },
        )
        if self.metrics is not None:
            self.metrics.record_claim(state.value)

        return HandlerOutcome.PROCESSED
