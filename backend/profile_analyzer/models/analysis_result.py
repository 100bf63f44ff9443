import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from profile_analyzer.db.base import Base
from profile_analyzer.schemas.analysis import ProfileStatistics

if TYPE_CHECKING:
    from profile_analyzer.models.profile import Profile


class AnalysisResult(Base):
    """
    Statistics computed from a profile's repository snapshot.

    This is a stored copy of ``compute_statistics`` output; it is recreated
    together with the snapshot on every refresh and never edited in place.
    The unique ``profile_id`` enforces the 1:1 relationship with Profile.
    """
    __tablename__ = "analysis_results"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    profile_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )

    total_stars: Mapped[int] = mapped_column(Integer, default=0, index=True)
    total_forks: Mapped[int] = mapped_column(Integer, default=0)
    total_watchers: Mapped[int] = mapped_column(Integer, default=0)
    total_size: Mapped[int] = mapped_column(Integer, default=0)
    repo_count: Mapped[int] = mapped_column(Integer, default=0)
    original_repo_count: Mapped[int] = mapped_column(Integer, default=0)
    forked_repo_count: Mapped[int] = mapped_column(Integer, default=0)
    average_stars_per_repo: Mapped[int] = mapped_column(Integer, default=0)

    top_languages: Mapped[List[str]] = mapped_column(JSON, default=list)
    language_breakdown: Mapped[Dict[str, int]] = mapped_column(JSON, default=dict)
    top_topics: Mapped[List[str]] = mapped_column(JSON, default=list)
    topic_breakdown: Mapped[Dict[str, int]] = mapped_column(JSON, default=dict)

    # {"name", "stars", "url"} / {"name", "forks", "url"}
    most_starred_repo: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)
    most_forked_repo: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)
    # Up to 10 {"name", "url", "updated_at", "language", "stars"} entries
    recent_repositories: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list)

    analysis_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)

    fetch_generation: Mapped[str] = mapped_column(String(32), nullable=False)

    profile: Mapped["Profile"] = relationship("Profile", back_populates="analysis")

    @classmethod
    def from_statistics(
        cls,
        stats: ProfileStatistics,
        profile_id: uuid.UUID,
        analysis_date: datetime,
        fetch_generation: str,
    ) -> "AnalysisResult":
        # JSON columns need plain types, so nested models and datetimes are dumped in json mode
        return cls(
            profile_id=profile_id,
            analysis_date=analysis_date,
            fetch_generation=fetch_generation,
            **stats.model_dump(mode="json"),
        )

    def __repr__(self) -> str:
        return f"<AnalysisResult(profile_id={self.profile_id}, repo_count={self.repo_count})>"
