"""Profile model, the aggregate root of one analyzed GitHub user."""
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import String, DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from profile_analyzer.db.base import Base

if TYPE_CHECKING:
    from profile_analyzer.models.analysis_result import AnalysisResult
    from profile_analyzer.models.repository import RepositorySnapshot


class Profile(Base):
    """
    A GitHub user profile as last fetched from the API.

    Attributes:
        id: Primary key (UUID)
        username: Lowercased GitHub login (unique)
        name: Display name
        avatar_url: Avatar image URL
        bio / location: Free-text profile fields
        public_repos / followers / following: Counters reported by GitHub
        profile_url: html_url of the profile
        created_at: Account creation time, as reported by GitHub
        last_refreshed_at: When this system last fetched the profile; drives the cache window
        fetch_generation: Id shared by the profile, its repositories and its analysis
            for the refresh that wrote them

    Relationships:
        repositories: Repository snapshot of the last refresh
        analysis: Statistics of the last refresh (1:1)
    """
    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    username: Mapped[str] = mapped_column(String(39), unique=True, nullable=False, index=True)
    name: Mapped[str | None] = mapped_column(String(255))
    avatar_url: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    bio: Mapped[str | None] = mapped_column(Text)
    location: Mapped[str | None] = mapped_column(String(255))
    public_repos: Mapped[int] = mapped_column(Integer, default=0)
    followers: Mapped[int] = mapped_column(Integer, default=0)
    following: Mapped[int] = mapped_column(Integer, default=0)
    profile_url: Mapped[str] = mapped_column(String(512), nullable=False, default="")

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    last_refreshed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )

    fetch_generation: Mapped[str] = mapped_column(String(32), nullable=False)

    # Relationships
    repositories: Mapped[list["RepositorySnapshot"]] = relationship(
        "RepositorySnapshot",
        back_populates="profile",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    analysis: Mapped["AnalysisResult"] = relationship(
        "AnalysisResult",
        back_populates="profile",
        uselist=False,  # 1:1 relationship
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, username={self.username})>"
