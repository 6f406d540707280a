"""Bounty issue resolution.

A pull request is only a bounty claim if the issue it references currently
carries the bounty label. The resolver confirms that with a single issue
lookup and is the only gate deciding claim validity.
"""

import logging
from typing import Any, Mapping, Optional, Union

import httpx

from src.bountyhook.github.client import GitHubAPI, GitHubAPIError
from src.bountyhook.webhook.models import Issue


logger = logging.getLogger(__name__)


def issue_has_label(issue: Union[Issue, Mapping[str, Any]], label_name: str) -> bool:
    """Check whether an issue's current label set contains ``label_name``.

    Accepts either a parsed webhook Issue or a raw GitHub API issue object.
    Label names are compared case-sensitively.
    """
    if isinstance(issue, Issue):
        return label_name in issue.label_names()

    labels = issue.get("labels") or []
    for label in labels:
        if isinstance(label, Mapping):
            if label.get("name") == label_name:
                return True
        elif label == label_name:
            return True
    return False


class BountyIssueResolver:
    """Confirms that an issue number refers to a live bounty issue.

    Attributes:
        github: Client used for the issue lookup.
        bounty_label: Name of the label marking bounty issues.
    """

    def __init__(self, github: GitHubAPI, bounty_label: str):
        self.github = github
        self.bounty_label = bounty_label

    def has_bounty_label(self, issue: Union[Issue, Mapping[str, Any]]) -> bool:
        return issue_has_label(issue, self.bounty_label)

    async def resolve(
        self,
        owner: str,
        repo: str,
        issue_number: int,
    ) -> Optional[int]:
        """Return ``issue_number`` if it is a bounty issue, else None.

        Lookup failures are logged and treated as unresolved.

        Args:
            owner: Repository owner login.
            repo: Repository name.
            issue_number: Candidate issue number.

        Returns:
            The issue number, or None if the issue is missing, lacks the
            bounty label, or could not be fetched.
        """
        try:
            issue = await self.github.get_issue(owner, repo, issue_number)
        except (GitHubAPIError, httpx.HTTPError, ValueError) as e:
            logger.error(
                "Issue lookup failed, treating as unresolved",
                extra={
                    "owner": owner,
                    "repo": repo,
                    "issue_number": issue_number,
                    "error": str(e),
                },
            )
            return None

        if issue is None:
            logger.info(
                "Referenced issue not found",
                extra={"owner": owner, "repo": repo, "issue_number": issue_number},
            )
            return None

        if not self.has_bounty_label(issue):
            logger.info(
                "Referenced issue is not a bounty issue",
                extra={
                    "owner": owner,
                    "repo": repo,
                    "issue_number": issue_number,
                    "bounty_label": self.bounty_label,
                },
            )
            return None

        return issue_number
