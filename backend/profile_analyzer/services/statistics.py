"""
Repository statistics for a single GitHub profile.

``compute_statistics`` is a pure function of the repository list: no I/O, no
clock, and the same input always yields the same output. Input order matters
and is expected to be GitHub's "most recently updated first" order:

- ties for most-starred / most-forked go to the earliest repository
- the recent-repositories slice is the first ``RECENT_REPOSITORIES_LIMIT`` entries
- top languages / topics with equal counts keep first-seen order
"""
import logging
from typing import Dict, List, Sequence

from profile_analyzer.schemas.analysis import (
    MostForkedRepo,
    MostStarredRepo,
    ProfileStatistics,
    RecentRepository,
)
from profile_analyzer.schemas.github import GitHubRepo

logger = logging.getLogger(__name__)

TOP_N_LIMIT = 10
RECENT_REPOSITORIES_LIMIT = 10


def top_keys(breakdown: Dict[str, int], limit: int = TOP_N_LIMIT) -> List[str]:
    """
    Keys of ``breakdown`` ordered by count descending.

    ``sorted`` is stable and dicts keep insertion order, so keys with equal
    counts stay in the order they were first counted.
    """
    ranked = sorted(breakdown.items(), key=lambda item: -item[1])
    return [key for key, _ in ranked[:limit]]


def rounded_average(total: int, count: int) -> int:
    """Integer mean rounded half up (2.5 -> 3); 0 when there is nothing to average."""
    if count <= 0:
        return 0
    return (2 * total + count) // (2 * count)


def compute_statistics(repositories: Sequence[GitHubRepo]) -> ProfileStatistics:
    """Reduce a repository list to a ProfileStatistics in one pass."""
    total_stars = 0
    total_forks = 0
    total_watchers = 0
    total_size = 0
    forked_count = 0
    language_breakdown: Dict[str, int] = {}
    topic_breakdown: Dict[str, int] = {}
    most_starred = MostStarredRepo()
    most_forked = MostForkedRepo()
    recent: List[RecentRepository] = []

    for repo in repositories:
        total_stars += repo.stargazers_count
        total_forks += repo.forks_count
        total_watchers += repo.watchers_count
        total_size += repo.size

        if repo.fork:
            forked_count += 1

        if repo.language:
            language_breakdown[repo.language] = language_breakdown.get(repo.language, 0) + 1

        for topic in repo.topics:
            topic_breakdown[topic] = topic_breakdown.get(topic, 0) + 1

        # Strict comparison: the incumbent keeps the title on a tie
        if repo.stargazers_count > most_starred.stars:
            most_starred = MostStarredRepo(
                name=repo.name, stars=repo.stargazers_count, url=repo.html_url
            )

        if repo.forks_count > most_forked.forks:
            most_forked = MostForkedRepo(
                name=repo.name, forks=repo.forks_count, url=repo.html_url
            )

        if len(recent) < RECENT_REPOSITORIES_LIMIT:
            recent.append(
                RecentRepository(
                    name=repo.name,
                    url=repo.html_url,
                    updated_at=repo.updated_at,
                    language=repo.language,
                    stars=repo.stargazers_count,
                )
            )

    repo_count = len(repositories)

    stats = ProfileStatistics(
        total_stars=total_stars,
        total_forks=total_forks,
        total_watchers=total_watchers,
        total_size=total_size,
        repo_count=repo_count,
        original_repo_count=repo_count - forked_count,
        forked_repo_count=forked_count,
        average_stars_per_repo=rounded_average(total_stars, repo_count),
        top_languages=top_keys(language_breakdown),
        language_breakdown=language_breakdown,
        top_topics=top_keys(topic_breakdown),
        topic_breakdown=topic_breakdown,
        most_starred_repo=most_starred,
        most_forked_repo=most_forked,
        recent_repositories=recent,
    )

    logger.debug(
        f"Computed statistics for {repo_count} repositories "
        f"({len(language_breakdown)} languages, {len(topic_breakdown)} topics)"
    )
    return stats
