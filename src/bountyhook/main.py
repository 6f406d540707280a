"""FastAPI application entry point for the bounty webhook processor.

This module exposes the GitHub webhook endpoint and wires the processor's
collaborators together on startup.

Endpoints:
- POST /webhook: verified GitHub deliveries
- GET /health: liveness probe
- GET /metrics: Prometheus metrics
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import Response

from .bounty.commits import CommitResolver
from .bounty.resolver import BountyIssueResolver
from .config import BountyHookSettings, get_settings
from .github.client import GitHubAPI, GitHubClient
from .handlers.issues import IssueHandler
from .handlers.pull_requests import PullRequestHandler
from .metrics import WebhookMetrics, get_metrics
from .storage.base import (
    BountyService,
    IssueStore,
    PullRequestStore,
    RepositoryStore,
    UserStore,
)
from .storage.memory import (
    InMemoryBountyService,
    InMemoryIssueStore,
    InMemoryPullRequestStore,
    InMemoryRepositoryStore,
    InMemoryUserStore,
)
from .tasks import BackgroundTaskRunner
from .webhook.dispatcher import EventDispatcher
from .webhook.signature import SignatureVerifier

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


class WebhookProcessor:
    """The wired components the webhook endpoint runs a delivery through.

    Attributes:
        verifier: Signature verifier backed by the repository store.
        dispatcher: Routes verified payloads to the handlers.
        tasks: Background task runner shared by the handlers.
        metrics: Prometheus metrics.
    """

    def __init__(
        self,
        verifier: SignatureVerifier,
        dispatcher: EventDispatcher,
        tasks: BackgroundTaskRunner,
        metrics: WebhookMetrics,
    ):
        self.verifier = verifier
        self.dispatcher = dispatcher
        self.tasks = tasks
        self.metrics = metrics


def build_processor(
    bounty_label: str,
    github: GitHubAPI,
    repositories: RepositoryStore,
    bounties: BountyService,
    issues: IssueStore,
    pull_requests: PullRequestStore,
    users: UserStore,
    metrics: Optional[WebhookMetrics] = None,
    tasks: Optional[BackgroundTaskRunner] = None,
) -> WebhookProcessor:
    """Wire all collaborators into a WebhookProcessor.

    Args:
        bounty_label: Label marking bounty issues.
        github: GitHub API client for issue and event lookups.
        repositories: Source of per-repository webhook secrets.
        bounties: Bounty creation collaborator.
        issues: Issue persistence collaborator.
        pull_requests: Claim persistence collaborator.
        users: User persistence collaborator.
        metrics: Metrics instance; defaults to the global one.
        tasks: Background task runner; a new one is created if omitted.

    Returns:
        Fully wired WebhookProcessor.
    """
    metrics = metrics or get_metrics()
    tasks = tasks or BackgroundTaskRunner()

    bounty_resolver = BountyIssueResolver(github, bounty_label)
    commit_resolver = CommitResolver(github)

    dispatcher = EventDispatcher(
        issue_handler=IssueHandler(
            bounties=bounties,
            issues=issues,
            bounty_resolver=bounty_resolver,
            commit_resolver=commit_resolver,
            tasks=tasks,
        ),
        pull_request_handler=PullRequestHandler(
            bounty_resolver=bounty_resolver,
            commit_resolver=commit_resolver,
            pull_requests=pull_requests,
            users=users,
            metrics=metrics,
        ),
    )

    return WebhookProcessor(
        verifier=SignatureVerifier(repositories),
        dispatcher=dispatcher,
        tasks=tasks,
        metrics=metrics,
    )


# Global instances, initialized during lifespan startup
processor: Optional[WebhookProcessor] = None
github_client: Optional[GitHubClient] = None


def _redact_secret(value: str, visible_chars: int = 4) -> str:
    """Redact a secret value, showing only the first few characters."""
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


def _log_configuration(settings: BountyHookSettings) -> None:
    """Log configuration values with secrets redacted."""
    logger.info("Webhook processor configuration:")
    logger.info(f"  GitHub Base URL: {settings.github_base_url}")
    logger.info(f"  GitHub Token: {_redact_secret(settings.github_token)}")
    logger.info(f"  GitHub Timeout Seconds: {settings.github_timeout_seconds}")
    logger.info(f"  GitHub Max Retries: {settings.github_max_retries}")
    logger.info(f"  Bounty Label: {settings.bounty_label}")
    logger.info(f"  Repositories With Secrets: {sorted(settings.repository_secrets)}")
    logger.info(f"  Host: {settings.host}")
    logger.info(f"  Port: {settings.port}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown.

    Handles:
    - Configuration loading and validation
    - Logging configuration (with secrets redacted)
    - Collaborator wiring
    - Draining background tasks and closing the GitHub client on shutdown
    """
    global processor, github_client

    logger.info("Webhook processor starting up...")

    settings = get_settings()
    _log_configuration(settings)

    github_client = GitHubClient(
        token=settings.github_token,
        base_url=settings.github_base_url,
        max_retries=settings.github_max_retries,
        timeout=settings.github_timeout_seconds,
    )

    logger.warning("Using in-memory persistence; state is lost on restart")
    processor = build_processor(
        bounty_label=settings.bounty_label,
        github=github_client,
        repositories=InMemoryRepositoryStore(settings.repository_secrets),
        bounties=InMemoryBountyService(),
        issues=InMemoryIssueStore(),
        pull_requests=InMemoryPullRequestStore(),
        users=InMemoryUserStore(),
    )

    logger.info("Webhook processor started successfully")

    yield

    logger.info("Webhook processor shutting down...")

    if processor is not None:
        await processor.tasks.drain()
    if github_client is not None:
        await github_client.close()

    logger.info("Webhook processor shutdown complete")


app = FastAPI(
    title="bountyhook",
    description="GitHub webhook processor for bounty issues and claims",
    version="1.0.0",
    lifespan=lifespan,
)


@app.get("/health")
async def health():
    """Liveness probe endpoint."""
    return {"status": "healthy"}


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    source = processor.metrics if processor is not None else get_metrics()
    return Response(
        content=source.generate(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )


@app.post("/webhook")
async def github_webhook(request: Request) -> Dict[str, Any]:
    """GitHub webhook receiver endpoint.

    The signature is checked against the raw body before any processing.
    Once it passes, the delivery is always acknowledged with 200, whatever
    the handlers did with it.

    Returns:
        dict: Acknowledgment with the handling status.

    Raises:
        HTTPException: 400 for a body that is not a JSON object, 401 for a
            failed signature check, 503 before startup completes.
    """
    if processor is None:
        logger.error("Webhook processor not initialized")
        raise HTTPException(status_code=503, detail="Webhook processor not initialized")

    raw_body = await request.body()
    try:
        payload = json.loads(raw_body)
    except ValueError:
        logger.warning("Webhook body is not valid JSON")
        raise HTTPException(status_code=400, detail="Invalid JSON payload")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Webhook payload must be a JSON object")

    repository = payload.get("repository")
    full_name = repository.get("full_name") if isinstance(repository, dict) else None

    verified = await processor.verifier.verify(
        raw_body,
        request.headers.get("x-hub-signature"),
        full_name,
    )
    if not verified:
        processor.metrics.record_signature_failure()
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    event_name = request.headers.get("x-github-event")
    logger.debug("GitHub secret validation OK", extra={"event": event_name})

    result = await processor.dispatcher.dispatch(event_name, payload)
    processor.metrics.record_webhook(result.event or "unknown", result.status.value)

    return {"status": result.status.value, "event": result.event}


if __name__ == "__main__":
    import uvicorn

    dev_settings = get_settings()
    uvicorn.run(
        "src.bountyhook.main:app",
        host=dev_settings.host,
        port=dev_settings.port,
        reload=True,
    )
