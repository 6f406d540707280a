"""Routing of verified webhook payloads to their handlers.

The dispatcher runs after signature verification. Whatever happens inside a
handler, the caller gets a result to acknowledge the delivery with: GitHub
retries deliveries that fail, and a handler error would otherwise turn into
a retry storm of events this service cannot process anyway.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, ValidationError

from src.bountyhook.handlers.issues import IssueHandler
from src.bountyhook.handlers.pull_requests import PullRequestHandler
from src.bountyhook.webhook.models import (
    EventKind,
    HandlerOutcome,
    IssueEvent,
    PullRequestEvent,
)


logger = logging.getLogger(__name__)


class DispatchResult(BaseModel):
    """Outcome of dispatching one delivery.

    Attributes:
        event: The ``x-github-event`` header value, if any.
        status: What the handler did with the event.
    """

    event: Optional[str] = None
    status: HandlerOutcome


class EventDispatcher:
    """Dispatches payloads by event kind to the issue and PR handlers.

    Attributes:
        issue_handler: Handler for ``issues`` events.
        pull_request_handler: Handler for ``pull_request`` events.
    """

    def __init__(
        self,
        issue_handler: IssueHandler,
        pull_request_handler: PullRequestHandler,
    ):
        self.issue_handler = issue_handler
        self.pull_request_handler = pull_request_handler

    async def dispatch(
        self,
        event_name: Optional[str],
        payload: Dict[str, Any],
    ) -> DispatchResult:
        """Route a verified payload to its handler.

        Unknown event kinds, payloads that do not match the event schema,
        and handler failures are all acknowledged; failures are logged.

        Args:
            event_name: Value of the ``x-github-event`` header.
            payload: The parsed JSON payload.

        Returns:
            DispatchResult describing what happened.
        """
        kind = EventKind.parse(event_name)
        if kind is None:
            logger.debug("Ignoring unhandled event kind", extra={"event": event_name})
            return DispatchResult(event=event_name, status=HandlerOutcome.IGNORED)

        action = payload.get("action")
        repository = payload.get("repository")
        full_name = repository.get("full_name") if isinstance(repository, dict) else None

        try:
            if kind is EventKind.ISSUES:
                status = await self.issue_handler.handle(
                    IssueEvent.model_validate(payload)
                )
            elif kind is EventKind.PULL_REQUEST:
                status = await self.pull_request_handler.handle(
                    PullRequestEvent.model_validate(payload)
                )
            else:
                status = HandlerOutcome.IGNORED
        except ValidationError as e:
            logger.warning(
                "Payload does not match event schema",
                extra={
                    "event": kind.value,
                    "action": action,
                    "repository": full_name,
                    "error_count": e.error_count(),
                },
            )
            status = HandlerOutcome.IGNORED
        except Exception as e:
            logger.exception(
                "Webhook handler failed",
                extra={
                    "event": kind.value,
                    "action": action,
                    "repository": full_name,
                    "error": str(e),
                },
            )
            status = HandlerOutcome.ERROR

        return DispatchResult(event=kind.value, status=status)
