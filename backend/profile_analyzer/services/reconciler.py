import logging
import time
import uuid
from datetime import datetime
from typing import Callable, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from profile_analyzer.core.exceptions import StorageError
from profile_analyzer.models.analysis_result import AnalysisResult
from profile_analyzer.models.profile import Profile
from profile_analyzer.models.repository import RepositorySnapshot
from profile_analyzer.schemas.github import GitHubRepo, GitHubUser
from profile_analyzer.services.statistics import compute_statistics
from profile_analyzer.utils.time_helpers import utcnow
from profile_analyzer.utils.validators import normalize_username

logger = logging.getLogger(__name__)


class PersistenceReconciler:
    """
    Writes one refresh of a GitHub user into the database.

    The profile upsert, the removal of the previous repository snapshot and
    analysis, and the insertion of the new ones all run in a single
    transaction and are tagged with the same ``fetch_generation``. Either all
    three records move to the new generation or none of them do, so running
    the reconciler again after a failure is always safe.
    """

    def __init__(self, session: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.session = session
        self._clock = clock

    async def reconcile(self, user: GitHubUser, repositories: Sequence[GitHubRepo]) -> Profile:
        """
        Persist a freshly fetched profile and repository list.

        Returns:
            The upserted Profile.

        Raises:
            StorageError: If any step fails; the transaction is rolled back.
        """
        start_time = time.monotonic()
        username = normalize_username(user.login)
        generation = uuid.uuid4().hex
        now = self._clock()

        logger.info(f"Starting data processing for {username} ({len(repositories)} repositories)")

        try:
            profile = await self._upsert_profile(user, username, now, generation)

            # Core DELETEs run immediately, before the inserts below are flushed,
            # so re-inserting the same github_id never trips the unique index
            await self.session.execute(
                delete(RepositorySnapshot).where(RepositorySnapshot.profile_id == profile.id)
            )
            await self.session.execute(
                delete(AnalysisResult).where(AnalysisResult.profile_id == profile.id)
            )

            self.session.add_all(
                [RepositorySnapshot.from_github(repo, profile.id, generation) for repo in repositories]
            )

            stats = compute_statistics(repositories)
            self.session.add(
                AnalysisResult.from_statistics(
                    stats, profile_id=profile.id, analysis_date=now, fetch_generation=generation
                )
            )

            await self.session.commit()

        except SQLAlchemyError as e:
            duration_ms = int((time.monotonic() - start_time) * 1000)
            logger.error(f"Data processing failed for {username} after {duration_ms}ms: {e}", exc_info=True)
            await self.session.rollback()
            raise StorageError(f"Failed to save GitHub data for {username}") from e

        duration_ms = int((time.monotonic() - start_time) * 1000)
        logger.info(
            f"Data processing completed for {username} in {duration_ms}ms "
            f"(stars={stats.total_stars}, repos={stats.repo_count}, "
            f"languages={len(stats.language_breakdown)}, generation={generation})"
        )
        return profile

    async def _upsert_profile(
        self, user: GitHubUser, username: str, now: datetime, generation: str
    ) -> Profile:
        result = await self.session.execute(select(Profile).where(Profile.username == username))
        profile: Optional[Profile] = result.scalar_one_or_none()

        if profile is None:
            profile = Profile(username=username)
            self.session.add(profile)
            logger.info(f"Creating profile for {username}")
        else:
            logger.info(f"Updating profile for {username}")

        profile.name = user.name
        profile.avatar_url = user.avatar_url
        profile.bio = user.bio
        profile.location = user.location
        profile.public_repos = user.public_repos
        profile.followers = user.followers
        profile.following = user.following
        profile.profile_url = user.html_url
        profile.created_at = user.created_at
        profile.last_refreshed_at = now
        profile.fetch_generation = generation

        # Flush so a new profile gets its primary key before children reference it
        await self.session.flush()
        return profile
