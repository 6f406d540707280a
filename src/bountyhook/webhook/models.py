"""GitHub webhook event models for bounty tracking.

This module defines the data models for the two GitHub webhook event kinds
the processor acts on (``issues`` and ``pull_request``), the enums used to
dispatch on them, and the pull request claim record that is persisted.

GitHub sends many more fields than are modelled here; unknown fields are
ignored so payloads from newer API versions still validate.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class EventKind(str, Enum):
    """Values of the ``x-github-event`` header the processor handles."""

    ISSUES = "issues"
    PULL_REQUEST = "pull_request"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["EventKind"]:
        """Return the matching kind, or None for events that are ignored."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class IssueAction(str, Enum):
    """Issue event actions with bounty side effects."""

    LABELED = "labeled"
    CLOSED = "closed"


class PullRequestAction(str, Enum):
    """Pull request event actions that drive the claim state machine."""

    OPENED = "opened"
    CLOSED = "closed"


class ClaimState(str, Enum):
    """Lifecycle state of a bounty claim.

    Attributes:
        OPENED: A pull request referencing a bounty issue was opened.
        MERGED: The pull request was merged; the bounty is awarded.
        CLOSED: The pull request was closed without a merge.
    """

    OPENED = "opened"
    MERGED = "merged"
    CLOSED = "closed"


class HandlerOutcome(str, Enum):
    """Result reported back to the webhook caller."""

    PROCESSED = "processed"
    IGNORED = "ignored"
    ERROR = "error"


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Account(_Payload):
    login: str


class GitHubUser(_Payload):
    """A GitHub user as embedded in a pull request payload."""

    id: int
    login: str
    name: Optional[str] = None
    avatar_url: Optional[str] = None


class Label(_Payload):
    name: str


class RepositoryRef(_Payload):
    """Repository reference carried by every webhook payload.

    Attributes:
        id: GitHub repository id.
        name: Repository name without owner prefix.
        full_name: Repository path in format "{owner}/{name}".
        owner: The owning user or organization.
    """

    id: int
    name: str
    full_name: str
    owner: Account


class Issue(_Payload):
    """Issue snapshot from a webhook payload."""

    id: int
    number: int = Field(..., gt=0)
    labels: List[Label] = Field(default_factory=list)

    def label_names(self) -> List[str]:
        return [label.name for label in self.labels]


class PullRequest(_Payload):
    id: int
    number: int = Field(..., gt=0)
    body: Optional[str] = None
    title: Optional[str] = None
    user: GitHubUser


class IssueEvent(_Payload):
    """Parsed ``issues`` webhook event.

    ``label`` is only present on ``labeled``/``unlabeled`` events and holds
    the label that was just applied or removed.
    """

    action: str
    issue: Issue
    repository: RepositoryRef
    label: Optional[Label] = None

    @property
    def issue_ref(self) -> str:
        """Canonical identifier in format "{owner}/{repo}#{number}"."""
        return f"{self.repository.full_name}#{self.issue.number}"


class PullRequestEvent(_Payload):
    """Parsed ``pull_request`` webhook event."""

    action: str
    pull_request: PullRequest
    repository: RepositoryRef

    @property
    def pr_ref(self) -> str:
        """Canonical identifier in format "{owner}/{repo}#{number}"."""
        return f"{self.repository.full_name}#{self.pull_request.number}"


class PullRequestClaim(BaseModel):
    """A pull request asserted to resolve a bounty issue.

    Attributes:
        repo_id: GitHub repository id.
        pr_id: GitHub pull request id (stable across events).
        pr_number: Pull request number within the repository.
        user_id: GitHub user id of the pull request author.
        issue_number: Number of the bounty issue the PR references.
        state: Claim lifecycle state.
        commit_id: Merge commit SHA when merged, None otherwise.
    """

    repo_id: int
    pr_id: int
    pr_number: int
    user_id: int
    issue_number: int = Field(..., gt=0)
    state: ClaimState
    commit_id: Optional[str] = None
