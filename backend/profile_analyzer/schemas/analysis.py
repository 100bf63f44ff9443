from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel


class MostStarredRepo(BaseModel):
    name: str = ""
    stars: int = 0
    url: str = ""


class MostForkedRepo(BaseModel):
    name: str = ""
    forks: int = 0
    url: str = ""


class RecentRepository(BaseModel):
    name: str
    url: str
    updated_at: datetime
    language: Optional[str] = None
    stars: int = 0


class ProfileStatistics(BaseModel):
    """Aggregate figures derived from one user's repository list."""
    total_stars: int = 0
    total_forks: int = 0
    total_watchers: int = 0
    total_size: int = 0
    repo_count: int = 0
    original_repo_count: int = 0
    forked_repo_count: int = 0
    average_stars_per_repo: int = 0
    top_languages: List[str] = []
    language_breakdown: Dict[str, int] = {}
    top_topics: List[str] = []
    topic_breakdown: Dict[str, int] = {}
    most_starred_repo: MostStarredRepo = MostStarredRepo()
    most_forked_repo: MostForkedRepo = MostForkedRepo()
    recent_repositories: List[RecentRepository] = []
