"""
Profile analysis endpoints.

Thin transport layer over ProfileService: validates the username, sets
Cache-Control headers and wraps results in the ``{success, data, meta}``
envelope. Domain errors propagate to the handlers registered in main.py.
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Path, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from profile_analyzer.db.session import get_db
from profile_analyzer.services.github_service import GitHubService, get_github_service
from profile_analyzer.services.profile_service import ProfileService
from profile_analyzer.utils.validators import validate_username

router = APIRouter()
logger = logging.getLogger(__name__)

MAX_PAGE_LIMIT = 100


# Dependency for ProfileService
def get_profile_service(
    db: AsyncSession = Depends(get_db),
    github_service: GitHubService = Depends(get_github_service),
) -> ProfileService:
    return ProfileService(db, github_service)


def valid_username(username: str = Path(..., description="GitHub login")) -> str:
    """Reject malformed usernames before they reach the service."""
    return validate_username(username)


def cache_control(max_age: int):
    """Dependency factory setting a public Cache-Control header."""
    def set_header(response: Response) -> None:
        response.headers["Cache-Control"] = f"public, max-age={max_age}"
    return set_header


def _meta(**extra) -> dict:
    return {**extra, "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/profile/{username}", dependencies=[Depends(cache_control(300))])
async def get_profile(
    username: str = Depends(valid_username),
    force_refresh: bool = Query(False, alias="forceRefresh"),
    service: ProfileService = Depends(get_profile_service),
):
    """
    Return a user's profile and repository statistics.

    Served from the database when the last refresh is less than 30 minutes
    old; otherwise (or with ``forceRefresh=true``) refetched from GitHub.
    """
    result = await service.get_profile(username, force_refresh=force_refresh)
    return {
        "success": True,
        "data": result.model_dump(mode="json"),
        "meta": _meta(username=username, cached=result.cached),
    }


@router.get("/profile/{username}/stats", dependencies=[Depends(cache_control(600))])
async def get_stats(
    username: str = Depends(valid_username),
    service: ProfileService = Depends(get_profile_service),
):
    """Return the stored statistics of an already analyzed user."""
    stats = await service.get_stats(username)
    return {
        "success": True,
        "data": stats.model_dump(mode="json"),
        "meta": _meta(username=username),
    }


@router.get("/profile/{username}/languages", dependencies=[Depends(cache_control(600))])
async def get_languages(
    username: str = Depends(valid_username),
    service: ProfileService = Depends(get_profile_service),
):
    """Return the language ranking and breakdown of an already analyzed user."""
    languages = await service.get_languages(username)
    return {
        "success": True,
        "data": languages.model_dump(mode="json"),
        "meta": _meta(username=username),
    }


@router.delete("/profile/{username}/cache")
async def clear_cache(
    username: str = Depends(valid_username),
    service: ProfileService = Depends(get_profile_service),
):
    """Delete the stored profile, repositories and analysis of a user."""
    await service.clear_cache(username)
    return {
        "success": True,
        "message": f"Cache cleared for user {username}",
        "meta": _meta(username=username),
    }


@router.get("/users/analyzed", dependencies=[Depends(cache_control(120))])
async def list_analyzed_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_LIMIT),
    service: ProfileService = Depends(get_profile_service),
):
    """List analyzed users, most recently refreshed first."""
    result = await service.list_analyzed_users(page=page, limit=limit)
    return {
        "success": True,
        "data": result.model_dump(mode="json"),
        "meta": _meta(),
    }
