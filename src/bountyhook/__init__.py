"""GitHub webhook processor for repository bounties.

This package turns GitHub webhook deliveries into bounty state changes:
- Signature verification against per-repository webhook secrets
- Bounty creation when the bounty label is applied to an issue
- Closing-commit lookup when a bounty issue is closed
- Claim tracking for pull requests that reference bounty issues
"""
