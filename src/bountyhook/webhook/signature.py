"""GitHub webhook signature verification.

GitHub signs each delivery with HMAC-SHA1 using the secret configured on
the repository webhook and sends the result in the ``x-hub-signature``
header as ``sha1=<hex digest>``. The digest must be computed over the raw
request bytes; re-serializing the parsed JSON can change the bytes and
break the comparison.
"""

import hashlib
import hmac
import logging
from typing import Optional

from src.bountyhook.storage.base import RepositoryStore


logger = logging.getLogger(__name__)

SIGNATURE_PREFIX = "sha1="


def compute_signature(secret: str, raw_body: bytes) -> str:
    """Compute the ``x-hub-signature`` value for a payload.

    Args:
        secret: The repository's webhook secret.
        raw_body: The exact request body bytes.

    Returns:
        Signature string in format "sha1=<hex digest>".
    """
    digest = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha1).hexdigest()
    return SIGNATURE_PREFIX + digest


def signature_matches(
    raw_body: bytes,
    signature: Optional[str],
    secret: Optional[str],
) -> bool:
    """Compare a declared signature against the expected one in constant time.

    Returns False when either the signature or the secret is missing.
    """
    if not signature or not secret:
        return False
    expected = compute_signature(secret, raw_body)
    return hmac.compare_digest(
        expected.encode("utf-8"),
        signature.encode("utf-8", errors="replace"),
    )


class SignatureVerifier:
    """Verifies webhook deliveries against per-repository secrets.

    The verifier never raises: a missing header, an unknown repository, a
    repository without a secret, or a failing secret lookup all reject the
    delivery.

    Attributes:
        repositories: Store used to resolve a repository's hook secret.
    """

    def __init__(self, repositories: RepositoryStore):
        self.repositories = repositories

    async def verify(
        self,
        raw_body: bytes,
        signature: Optional[str],
        full_name: Optional[str],
    ) -> bool:
        """Check a delivery's signature.

        Args:
            raw_body: The exact request body bytes.
            signature: Value of the ``x-hub-signature`` header.
            full_name: ``repository.full_name`` from the parsed payload.

        Returns:
            True if the signature matches the repository's secret.
        """
        if not signature:
            logger.warning("Webhook delivery missing signature header")
            return False
        if not isinstance(full_name, str) or not full_name:
            logger.warning("Webhook payload missing repository full name")
            return False

        try:
            repo = await self.repositories.get_repo(full_name)
        except Exception as e:
            logger.error(
                "Failed to resolve webhook secret",
                extra={"repository": full_name, "error": str(e)},
            )
            return False

        if repo is None or not repo.hook_secret:
            logger.warning(
                "No webhook secret configured for repository",
                extra={"repository": full_name},
            )
            return False

        if not signature_matches(raw_body, signature, repo.hook_secret):
            logger.warning(
                "Webhook signature mismatch",
                extra={"repository": full_name},
            )
            return False

        return True
