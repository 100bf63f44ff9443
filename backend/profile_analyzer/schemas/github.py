"""Upstream GitHub REST payloads, validated before they reach the core."""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class GitHubUser(BaseModel):
    """Subset of ``GET /users/{username}`` the analyzer keeps."""

    model_config = ConfigDict(extra="ignore")

    login: str
    name: Optional[str] = None
    avatar_url: str = ""
    bio: Optional[str] = None
    location: Optional[str] = None
    public_repos: int = 0
    followers: int = 0
    following: int = 0
    html_url: str = ""
    created_at: datetime

    @field_validator("public_repos", "followers", "following", mode="before")
    @classmethod
    def none_count_is_zero(cls, v: Any) -> Any:
        return 0 if v is None else v


class GitHubRepo(BaseModel):
    """One entry of ``GET /users/{username}/repos``."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    full_name: str
    html_url: str
    description: Optional[str] = None
    language: Optional[str] = None
    stargazers_count: int = 0
    forks_count: int = 0
    watchers_count: int = 0
    size: int = 0
    topics: List[str] = []
    license: Optional[Dict[str, Any]] = None
    fork: bool = False
    created_at: datetime
    updated_at: datetime

    @field_validator("stargazers_count", "forks_count", "watchers_count", "size", mode="before")
    @classmethod
    def none_count_is_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("topics", mode="before")
    @classmethod
    def none_topics_is_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("fork", mode="before")
    @classmethod
    def none_fork_is_false(cls, v: Any) -> Any:
        return False if v is None else v
