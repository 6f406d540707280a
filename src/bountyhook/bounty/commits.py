"""Commit resolution from issue and pull request timelines.

When a bounty issue is closed or a claiming pull request is merged, the
commit responsible is found in the issue events API. Callers pass the event
types to accept ordered from most to least authoritative; the first type
with a matching event wins.
"""

import logging
from typing import Iterable, List, Optional, Sequence

import httpx

from src.bountyhook.github.client import GitHubAPI, GitHubAPIError
from src.bountyhook.github.models import IssueTimelineEvent


logger = logging.getLogger(__name__)

# Event types used by the handlers
ISSUE_CLOSE_EVENT_TYPES = ("referenced", "closed")
PULL_REQUEST_MERGE_EVENT_TYPES = ("merged",)


def find_issue_event(
    events: Iterable[IssueTimelineEvent],
    event_type: str,
    actor: str,
) -> Optional[IssueTimelineEvent]:
    """Return the first event of ``event_type`` triggered by ``actor``."""
    for event in events:
        if event.actor_login == actor and event.event == event_type:
            return event
    return None


class CommitResolver:
    """Finds the commit tied to a lifecycle event on an issue or PR.

    Attributes:
        github: Client used for the issue events lookup.
    """

    def __init__(self, github: GitHubAPI):
        self.github = github

    async def find_commit_id(
        self,
        owner: str,
        repo: str,
        number: int,
        event_types: Sequence[str],
        actor: Optional[str] = None,
    ) -> Optional[str]:
        """Search the timeline for a terminating commit.

        The timeline is fetched once. For each event type in order, the
        first event by ``actor`` of that type is taken; its commit id is
        returned as soon as one type yields a match.

        Args:
            owner: Repository owner login.
            repo: Repository name.
            number: Issue or pull request number.
            event_types: Acceptable event types, most authoritative first.
            actor: Login the event must be attributed to. Defaults to the
                repository owner.

        Returns:
            The commit SHA, or None if no requested type matched or the
            lookup failed.
        """
        actor = actor or owner
        logger.debug(
            "Searching timeline for commit",
            extra={
                "owner": owner,
                "repo": repo,
                "number": number,
                "event_types": list(event_types),
            },
        )

        try:
            raw_events = await self.github.get_issue_events(owner, repo, number)
            events: List[IssueTimelineEvent] = [
                IssueTimelineEvent.from_github_response(raw)
                for raw in raw_events
                if isinstance(raw, dict)
            ]
        except (GitHubAPIError, httpx.HTTPError, ValueError) as e:
            logger.error(
                "Issue events lookup failed, no commit resolved",
                extra={
                    "owner": owner,
                    "repo": repo,
                    "number": number,
                    "event_types": list(event_types),
                    "error": str(e),
                },
            )
            return None

        for event_type in event_types:
            event = find_issue_event(events, event_type, actor)
            if event is not None and event.commit_id:
                return event.commit_id

        return None
