"""Pytest configuration and shared fixtures for all tests."""

import pytest

from src.bountyhook.github.client import GitHubAPIError
from tests.helpers import FakeGitHub


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def github_error() -> GitHubAPIError:
    return GitHubAPIError("GitHub API error: 502", status_code=502)
