import logging
import math
import time
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from profile_analyzer.core.config import settings
from profile_analyzer.core.exceptions import AnalyzerError, NotFoundError, StorageError
from profile_analyzer.models.analysis_result import AnalysisResult
from profile_analyzer.models.profile import Profile
from profile_analyzer.models.repository import RepositorySnapshot
from profile_analyzer.schemas.profile import (
    AnalysisOut,
    AnalyzedUserOut,
    AnalyzedUsersPage,
    LanguagesOut,
    ProfileOut,
    ProfileResult,
)
from profile_analyzer.services.github_service import GitHubService
from profile_analyzer.services.locks import KeyedLock, refresh_locks
from profile_analyzer.services.reconciler import PersistenceReconciler
from profile_analyzer.utils.time_helpers import as_utc, utcnow
from profile_analyzer.utils.validators import normalize_username

logger = logging.getLogger(__name__)


class ProfileService:
    """
    Serves profile analyses from the database, refreshing from GitHub when needed.

    The persisted ``last_refreshed_at`` timestamp is the cache: a profile
    refreshed less than ``cache_validity`` ago is returned as stored,
    anything older (or a forced refresh) goes through a full
    fetch -> reconcile -> re-read cycle. Upstream and storage failures are
    never retried and never replaced by stale data.
    """

    def __init__(
        self,
        session: AsyncSession,
        github_service: GitHubService,
        locks: KeyedLock = refresh_locks,
        clock: Callable[[], datetime] = utcnow,
        cache_validity: Optional[timedelta] = None,
    ):
        self.session = session
        self.github_service = github_service
        self.locks = locks
        self._clock = clock
        self.cache_validity = cache_validity or timedelta(minutes=settings.CACHE_VALIDITY_MINUTES)
        self.reconciler = PersistenceReconciler(session, clock=clock)

    def is_fresh(self, profile: Profile, now: datetime) -> bool:
        """True while the stored profile is inside the cache window."""
        return now - as_utc(profile.last_refreshed_at) < self.cache_validity

    async def get_profile(self, username: str, force_refresh: bool = False) -> ProfileResult:
        start_time = time.monotonic()
        username = normalize_username(username)
        requested_at = self._clock()

        logger.info(f"Starting profile analysis for {username} (force_refresh={force_refresh})")

        try:
            if not force_refresh:
                profile = await self._find_profile(username)
                if profile is not None and self.is_fresh(profile, requested_at):
                    cache_age = requested_at - as_utc(profile.last_refreshed_at)
                    logger.info(f"Returning cached data for {username} (age {int(cache_age.total_seconds())}s)")
                    return await self._build_result(profile, cached=True)

            async with self.locks.hold(username):
                # Another request may have refreshed this user while we waited; the
                # session may still hold the row from the cache check, so reload it
                profile = await self._find_profile(username, reload=True)
                if profile is not None and as_utc(profile.last_refreshed_at) > requested_at:
                    logger.info(f"Using refresh completed by a concurrent request for {username}")
                    return await self._build_result(profile, cached=True, reload=True)

                user = await self.github_service.fetch_profile(username)
                repositories = await self.github_service.fetch_all_repositories(username)

                logger.info(
                    f"Fetched GitHub data for {username} "
                    f"(repos={len(repositories)}, followers={user.followers})"
                )

                await self.reconciler.reconcile(user, repositories)

            profile = await self._find_profile(username)
            if profile is None:
                raise StorageError(f"Profile for {username} missing after refresh")

            duration_ms = int((time.monotonic() - start_time) * 1000)
            logger.info(f"Profile analysis completed for {username} in {duration_ms}ms")
            return await self._build_result(profile, cached=False)

        except AnalyzerError as e:
            raise self._annotate_failure(e, "Profile analysis", username, start_time)

    async def get_stats(self, username: str) -> AnalysisOut:
        start_time = time.monotonic()
        username = normalize_username(username)
        logger.info(f"Fetching stats for {username}")

        try:
            analysis = await self._require_analysis(
                username, missing_profile=f"GitHub user '{username}' not found"
            )
        except AnalyzerError as e:
            raise self._annotate_failure(e, "Stats lookup", username, start_time)

        logger.info(f"Stats retrieved for {username}")
        return AnalysisOut.model_validate(analysis)

    async def get_languages(self, username: str) -> LanguagesOut:
        start_time = time.monotonic()
        username = normalize_username(username)
        logger.info(f"Fetching languages for {username}")

        try:
            analysis = await self._require_analysis(
                username, missing_profile=f"User {username} not found. Please fetch profile first."
            )
        except AnalyzerError as e:
            raise self._annotate_failure(e, "Languages lookup", username, start_time)

        logger.info(f"Languages retrieved for {username} ({len(analysis.language_breakdown)} languages)")
        return LanguagesOut(
            top_languages=analysis.top_languages,
            language_breakdown=analysis.language_breakdown,
        )

    async def clear_cache(self, username: str) -> None:
        """Delete a profile together with its repositories and analysis."""
        start_time = time.monotonic()
        username = normalize_username(username)
        logger.info(f"Clearing cache for {username}")

        try:
            profile = await self._find_profile(username)
            if profile is None:
                raise NotFoundError(f"User {username} not found.")

            try:
                # Children before parent
                await self.session.execute(
                    delete(RepositorySnapshot).where(RepositorySnapshot.profile_id == profile.id)
                )
                await self.session.execute(
                    delete(AnalysisResult).where(AnalysisResult.profile_id == profile.id)
                )
                await self.session.execute(delete(Profile).where(Profile.id == profile.id))
                await self.session.commit()
            except SQLAlchemyError as e:
                logger.error(f"Failed to clear cache for {username}: {e}", exc_info=True)
                await self.session.rollback()
                raise StorageError(f"Failed to clear cache for {username}") from e

        except AnalyzerError as e:
            raise self._annotate_failure(e, "Cache clear", username, start_time)

        logger.info(f"Cache cleared successfully for {username}")

    async def list_analyzed_users(self, page: int = 1, limit: int = 10) -> AnalyzedUsersPage:
        start_time = time.monotonic()
        logger.info(f"Fetching analyzed users (page={page}, limit={limit})")

        skip = (page - 1) * limit
        try:
            result = await self.session.execute(
                select(Profile)
                .order_by(Profile.last_refreshed_at.desc(), Profile.username)
                .offset(skip)
                .limit(limit)
            )
            profiles = result.scalars().all()
            total = (await self.session.execute(select(func.count()).select_from(Profile))).scalar_one()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list analyzed users: {e}", exc_info=True)
            raise self._annotate_failure(
                StorageError("Failed to list analyzed users"), "Analyzed users listing", None, start_time
            ) from e

        logger.info(f"Retrieved {len(profiles)} analyzed users (total={total})")
        return AnalyzedUsersPage(
            users=[AnalyzedUserOut.model_validate(p) for p in profiles],
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit) if total else 0,
        )

    def _annotate_failure(
        self, error: AnalyzerError, operation: str, username: Optional[str], start_time: float
    ) -> AnalyzerError:
        """Log a failed operation and attach the username and elapsed time to its error."""
        duration_ms = int((time.monotonic() - start_time) * 1000)
        subject = f" for {username}" if username else ""
        logger.error(f"{operation} failed{subject} after {duration_ms}ms: {error.message}")
        return error.annotate(username, duration_ms)

    async def _find_profile(self, username: str, reload: bool = False) -> Optional[Profile]:
        statement = select(Profile).where(Profile.username == username)
        if reload:
            statement = statement.execution_options(populate_existing=True)
        try:
            result = await self.session.execute(statement)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load profile {username}: {e}", exc_info=True)
            raise StorageError(f"Failed to load profile {username}") from e

    async def _find_analysis(self, profile: Profile, reload: bool = False) -> Optional[AnalysisResult]:
        statement = select(AnalysisResult).where(AnalysisResult.profile_id == profile.id)
        if reload:
            statement = statement.execution_options(populate_existing=True)
        try:
            result = await self.session.execute(statement)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load analysis for {profile.username}: {e}", exc_info=True)
            raise StorageError(f"Failed to load analysis for {profile.username}") from e

    async def _require_analysis(self, username: str, missing_profile: str) -> AnalysisResult:
        profile = await self._find_profile(username)
        if profile is None:
            raise NotFoundError(missing_profile)

        analysis = await self._find_analysis(profile)
        if analysis is None:
            raise NotFoundError(f"Analysis data for {username} not found.")
        return analysis

    async def _build_result(self, profile: Profile, cached: bool, reload: bool = False) -> ProfileResult:
        analysis = await self._find_analysis(profile, reload=reload)
        return ProfileResult(
            user=ProfileOut.model_validate(profile),
            analysis=AnalysisOut.model_validate(analysis) if analysis is not None else None,
            cached=cached,
        )
