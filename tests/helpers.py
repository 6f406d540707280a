"""Payload builders and fakes shared by the test suite."""

import asyncio
from typing import Any, Dict, List, Optional, Tuple


def run_async(coro):
    return asyncio.run(coro)


class FakeGitHub:
    """In-memory stand-in for the GitHub issue and events lookups.

    Records every call so tests can assert on lookup counts.
    """

    def __init__(self):
        self.issues: Dict[Tuple[str, str, int], Dict[str, Any]] = {}
        self.events: Dict[Tuple[str, str, int], List[Dict[str, Any]]] = {}
        self.issue_calls: List[Tuple[str, str, int]] = []
        self.event_calls: List[Tuple[str, str, int]] = []
        self.fail_with: Optional[Exception] = None

    def add_issue(
        self,
        owner: str,
        repo: str,
        number: int,
        labels: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        issue = {
            "id": 1000 + number,
            "number": number,
            "labels": [{"name": name} for name in (labels or [])],
        }
        self.issues[(owner, repo, number)] = issue
        return issue

    def add_event(
        self,
        owner: str,
        repo: str,
        number: int,
        event: str,
        actor: Optional[str],
        commit_id: Optional[str] = None,
    ) -> None:
        self.events.setdefault((owner, repo, number), []).append(
            {
                "event": event,
                "actor": {"login": actor} if actor is not None else None,
                "commit_id": commit_id,
            }
        )

    async def get_issue(self, owner: str, repo: str, issue_number: int):
        self.issue_calls.append((owner, repo, issue_number))
        if self.fail_with is not None:
            raise self.fail_with
        return self.issues.get((owner, repo, issue_number))

    async def get_issue_events(self, owner: str, repo: str, issue_number: int):
        self.event_calls.append((owner, repo, issue_number))
        if self.fail_with is not None:
            raise self.fail_with
        return list(self.events.get((owner, repo, issue_number), []))


def make_repository(
    owner: str = "acme",
    name: str = "widgets",
    repo_id: int = 7,
) -> Dict[str, Any]:
    return {
        "id": repo_id,
        "name": name,
        "full_name": f"{owner}/{name}",
        "owner": {"login": owner},
    }


def make_pull_request_payload(
    action: str = "opened",
    body: Optional[str] = "Fixes #42",
    title: Optional[str] = "Add feature X",
    pr_id: int = 5001,
    pr_number: int = 12,
    user_id: int = 99,
    login: str = "dev1",
    owner: str = "acme",
    repo: str = "widgets",
) -> Dict[str, Any]:
    return {
        "action": action,
        "pull_request": {
            "id": pr_id,
            "number": pr_number,
            "body": body,
            "title": title,
            "user": {
                "id": user_id,
                "login": login,
                "name": "Dev One",
                "avatar_url": f"https://avatars.example.com/{login}",
            },
        },
        "repository": make_repository(owner, repo),
    }


def make_issue_payload(
    action: str = "labeled",
    number: int = 42,
    issue_id: int = 1042,
    labels: Optional[List[str]] = None,
    label: Optional[str] = None,
    owner: str = "acme",
    repo: str = "widgets",
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "action": action,
        "issue": {
            "id": issue_id,
            "number": number,
            "labels": [{"name": name} for name in (labels or [])],
        },
        "repository": make_repository(owner, repo),
    }
    if label is not None:
        payload["label"] = {"name": label}
    return payload
