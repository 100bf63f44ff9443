import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from profile_analyzer.core.config import settings
from profile_analyzer.core.exceptions import (
    AnalyzerError,
    NotFoundError,
    RateLimitedError,
    UnauthorizedError,
    UpstreamError,
)
from profile_analyzer.schemas.github import GitHubRepo, GitHubUser

logger = logging.getLogger(__name__)

# GitHub API constants
GITHUB_API_BASE = "https://api.github.com"
DEFAULT_PROFILE_TIMEOUT_SECONDS = 10.0
DEFAULT_REPOS_TIMEOUT_SECONDS = 15.0
DEFAULT_PAGE_SIZE = 100

# Status codes reported for failures that never produced an HTTP response
GATEWAY_TIMEOUT = 504
BAD_GATEWAY = 502


@dataclass(frozen=True)
class GitHubClientConfig:
    """Immutable connection settings for GitHubService."""

    base_url: str = GITHUB_API_BASE
    token: Optional[str] = None
    user_agent: str = "GitHub-Profile-Analyzer"
    profile_timeout: float = DEFAULT_PROFILE_TIMEOUT_SECONDS
    repos_timeout: float = DEFAULT_REPOS_TIMEOUT_SECONDS
    page_size: int = DEFAULT_PAGE_SIZE

    @classmethod
    def from_settings(cls) -> "GitHubClientConfig":
        return cls(
            base_url=settings.GITHUB_API_URL.rstrip("/"),
            token=settings.GITHUB_TOKEN,
            user_agent=settings.GITHUB_USER_AGENT,
            profile_timeout=settings.GITHUB_PROFILE_TIMEOUT_SECONDS,
            repos_timeout=settings.GITHUB_REPOS_TIMEOUT_SECONDS,
            page_size=settings.GITHUB_PAGE_SIZE,
        )

    @property
    def headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": self.user_agent,
        }
        # Add authentication if token is available
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        return headers


class GitHubService:
    """
    Client for the two GitHub REST endpoints the analyzer needs.

    Features:
    - Profile lookup (``/users/{username}``)
    - Exhaustive, serial pagination over ``/users/{username}/repos``
    - Classification of HTTP and transport failures into domain errors

    No retries are attempted; the first failure aborts the operation.
    """

    def __init__(
        self,
        config: Optional[GitHubClientConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or GitHubClientConfig.from_settings()
        # Injected in tests (httpx.MockTransport); None means the real network
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.config.base_url,
            headers=self.config.headers,
            timeout=httpx.Timeout(timeout),
            transport=self._transport,
        )

    async def fetch_profile(self, username: str) -> GitHubUser:
        """
        Fetch a user's public profile.

        Raises:
            NotFoundError, RateLimitedError, UnauthorizedError, UpstreamError
        """
        logger.info(f"Fetching user data from GitHub API for {username}")

        async with self._client(self.config.profile_timeout) as client:
            data = await self._get_json(
                client, f"/users/{username}", username, timeout=self.config.profile_timeout
            )

        try:
            user = GitHubUser.model_validate(data)
        except PydanticValidationError as e:
            logger.error(f"Unexpected profile payload for {username}: {e}")
            raise UpstreamError(f"GitHub API returned an invalid profile for '{username}'", BAD_GATEWAY) from e

        logger.info(f"Successfully fetched user data for {username}")
        return user

    async def fetch_all_repositories(self, username: str) -> List[GitHubRepo]:
        """
        Fetch every public repository of a user, most recently updated first.

        Pages are requested one after another until GitHub returns a page
        shorter than ``page_size`` (an empty page included). The page length
        is the only stop signal; no total count is trusted. A failure on any
        page aborts the whole fetch, partial results are never returned.

        Raises:
            NotFoundError, RateLimitedError, UnauthorizedError, UpstreamError
        """
        logger.info(f"Fetching repositories from GitHub API for {username}")

        per_page = self.config.page_size
        repositories: List[GitHubRepo] = []
        seen_ids = set()
        page = 1

        async with self._client(self.config.repos_timeout) as client:
            while True:
                params = {
                    "per_page": per_page,
                    "page": page,
                    "sort": "updated",
                    "direction": "desc",
                }
                data = await self._get_json(
                    client,
                    f"/users/{username}/repos",
                    username,
                    timeout=self.config.repos_timeout,
                    params=params,
                )

                if not isinstance(data, list):
                    raise UpstreamError(
                        f"GitHub API returned an invalid repository page for '{username}'", BAD_GATEWAY
                    )

                for raw in data:
                    try:
                        repo = GitHubRepo.model_validate(raw)
                    except PydanticValidationError as e:
                        logger.error(f"Unexpected repository payload for {username} on page {page}: {e}")
                        raise UpstreamError(
                            f"GitHub API returned an invalid repository for '{username}'", BAD_GATEWAY
                        ) from e

                    # A repository updated mid-pagination can move onto a later page
                    if repo.id in seen_ids:
                        logger.warning(f"Skipping duplicate repository {repo.full_name} on page {page}")
                        continue
                    seen_ids.add(repo.id)
                    repositories.append(repo)

                logger.info(
                    f"Fetched page {page} of repositories for {username} "
                    f"({len(data)} in page, {len(repositories)} so far)"
                )

                if len(data) < per_page:
                    break
                page += 1

        logger.info(f"Successfully fetched {len(repositories)} repositories for {username} in {page} pages")
        return repositories

    async def _get_json(
        self,
        client: httpx.AsyncClient,
        path: str,
        username: str,
        timeout: float,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        # httpx applies its timeout per phase (connect, read, write, pool);
        # wait_for bounds the whole request, body included
        try:
            response = await asyncio.wait_for(client.get(path, params=params), timeout=timeout)
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.warning(f"Timeout calling GitHub {path}: {e}")
            raise UpstreamError(f"GitHub API request timed out for '{username}'", GATEWAY_TIMEOUT) from e
        except httpx.HTTPError as e:
            logger.warning(f"Transport error calling GitHub {path}: {e}")
            raise UpstreamError(f"GitHub API is unreachable: {e}", BAD_GATEWAY) from e

        if response.status_code >= 400:
            raise self.classify_error(response, username)

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(f"GitHub API returned malformed JSON for '{username}'", BAD_GATEWAY) from e

    def classify_error(self, response: httpx.Response, username: str) -> AnalyzerError:
        """Translate a failed GitHub response into a domain error."""
        status = response.status_code

        if status == 404:
            logger.info(f"GitHub user {username} not found")
            return NotFoundError(f"GitHub user '{username}' not found")

        if status == 403:
            retry_after = self._retry_after(response)
            if retry_after is not None:
                logger.warning(f"GitHub API rate limit exceeded. Retry in {retry_after}s")
            else:
                logger.warning("GitHub API rate limit exceeded")
            return RateLimitedError(
                "GitHub API rate limit exceeded. Please try again later.",
                retry_after=retry_after,
            )

        if status == 401:
            logger.error("GitHub API rejected the configured credentials")
            return UnauthorizedError("GitHub API authentication failed")

        logger.error(f"GitHub API error for {username}: HTTP {status}")
        return UpstreamError(f"GitHub API error: HTTP {status}", status)

    @staticmethod
    def _retry_after(response: httpx.Response) -> Optional[int]:
        """Seconds until GitHub accepts requests again, if it told us."""
        retry_after = response.headers.get("Retry-After")
        if retry_after and retry_after.isdigit():
            return int(retry_after)

        reset_time = response.headers.get("X-RateLimit-Reset")
        if reset_time and reset_time.isdigit():
            return max(0, int(reset_time) - int(time.time()))

        return None


# Global service instance
_github_service: Optional[GitHubService] = None


def get_github_service() -> GitHubService:
    """Get the global GitHub service instance."""
    global _github_service
    if _github_service is None:
        _github_service = GitHubService()
    return _github_service
