from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from profile_analyzer.schemas.analysis import ProfileStatistics


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    username: str
    name: Optional[str] = None
    avatar_url: str
    bio: Optional[str] = None
    location: Optional[str] = None
    public_repos: int
    followers: int
    following: int
    profile_url: str
    created_at: datetime
    last_refreshed_at: datetime


class AnalysisOut(ProfileStatistics):
    """Persisted statistics plus the time they were computed."""
    model_config = ConfigDict(from_attributes=True)

    analysis_date: datetime


class ProfileResult(BaseModel):
    """Outcome of ``ProfileService.get_profile``."""
    user: ProfileOut
    analysis: Optional[AnalysisOut] = None
    cached: bool


class LanguagesOut(BaseModel):
    top_languages: List[str]
    language_breakdown: Dict[str, int]


class AnalyzedUserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    username: str
    name: Optional[str] = None
    avatar_url: str
    public_repos: int
    followers: int
    last_refreshed_at: datetime


class AnalyzedUsersPage(BaseModel):
    users: List[AnalyzedUserOut]
    total: int
    page: int
    limit: int
    total_pages: int
