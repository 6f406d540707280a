"""GitHub API response models used by the resolvers."""

from typing import Any, Dict, Optional

from pydantic import BaseModel


class IssueTimelineEvent(BaseModel):
    """One entry of the issue events API.

    Attributes:
        event: Event type, e.g. "referenced", "closed", "merged".
        actor_login: Login of the user who triggered the event, if any.
        commit_id: Commit SHA associated with the event, if any.
    """

    event: str
    actor_login: Optional[str] = None
    commit_id: Optional[str] = None

    @classmethod
    def from_github_response(cls, data: Dict[str, Any]) -> "IssueTimelineEvent":
        """Build an event from a raw GitHub API object.

        Deleted accounts show up with a null actor.
        """
        actor = data.get("actor") or {}
        return cls(
            event=str(data.get("event", "")),
            actor_login=actor.get("login") if isinstance(actor, dict) else None,
            commit_id=data.get("commit_id"),
        )
