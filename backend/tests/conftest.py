import os

# Set environment variables for tests before importing the app
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["GITHUB_TOKEN"] = ""

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from profile_analyzer.schemas.github import GitHubRepo, GitHubUser

BASE_TIME = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when a test advances it."""

    def __init__(self, now: datetime = BASE_TIME):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def _repo_payload(repo_id: int, **overrides: Any) -> dict:
    """Raw ``/users/{username}/repos`` entry as GitHub returns it."""
    name = overrides.pop("name", f"repo-{repo_id}")
    owner = overrides.pop("owner", "octocat")
    payload = {
        "id": repo_id,
        "name": name,
        "full_name": f"{owner}/{name}",
        "html_url": f"https://github.com/{owner}/{name}",
        "description": None,
        "language": "Python",
        "stargazers_count": 0,
        "forks_count": 0,
        "watchers_count": 0,
        "size": 100,
        "topics": [],
        "license": None,
        "fork": False,
        "created_at": "2020-01-01T00:00:00Z",
        "updated_at": "2025-01-01T00:00:00Z",
    }
    payload.update(overrides)
    return payload


def _user_payload(login: str = "octocat", **overrides: Any) -> dict:
    """Raw ``/users/{username}`` body as GitHub returns it."""
    payload = {
        "login": login,
        "id": 583231,
        "name": "The Octocat",
        "avatar_url": f"https://avatars.githubusercontent.com/{login}",
        "bio": None,
        "location": "San Francisco",
        "public_repos": 8,
        "followers": 20,
        "following": 9,
        "html_url": f"https://github.com/{login}",
        "created_at": "2011-01-25T18:44:36Z",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_repo():
    def _make(repo_id: int, **overrides: Any) -> GitHubRepo:
        return GitHubRepo.model_validate(_repo_payload(repo_id, **overrides))
    return _make


@pytest.fixture
def make_user():
    def _make(login: str = "octocat", **overrides: Any) -> GitHubUser:
        return GitHubUser.model_validate(_user_payload(login, **overrides))
    return _make


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repo_payload():
    return _repo_payload


@pytest.fixture
def user_payload():
    return _user_payload
