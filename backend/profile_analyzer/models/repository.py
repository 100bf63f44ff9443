import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List

from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from profile_analyzer.db.base import Base
from profile_analyzer.schemas.github import GitHubRepo

if TYPE_CHECKING:
    from profile_analyzer.models.profile import Profile


class RepositorySnapshot(Base):
    """
    One repository of a profile, as returned by the last refresh.
    The whole set for a profile is replaced on every refresh, never patched.
    """
    __tablename__ = "repositories"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    # Upstream numeric id
    github_id: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False, index=True)

    profile_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str] = mapped_column(String(512), nullable=False)
    html_url: Mapped[str] = mapped_column(String(512), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    language: Mapped[str | None] = mapped_column(String(100), index=True)

    stargazers_count: Mapped[int] = mapped_column(Integer, default=0)
    forks_count: Mapped[int] = mapped_column(Integer, default=0)
    watchers_count: Mapped[int] = mapped_column(Integer, default=0)
    size: Mapped[int] = mapped_column(Integer, default=0)

    topics: Mapped[List[str]] = mapped_column(JSON, default=list)
    # Opaque license object exactly as GitHub sent it
    license: Mapped[Dict[str, Any] | None] = mapped_column(JSON)
    is_fork: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    fetch_generation: Mapped[str] = mapped_column(String(32), nullable=False)

    profile: Mapped["Profile"] = relationship("Profile", back_populates="repositories")

    @classmethod
    def from_github(
        cls, repo: GitHubRepo, profile_id: uuid.UUID, fetch_generation: str
    ) -> "RepositorySnapshot":
        return cls(
            github_id=repo.id,
            profile_id=profile_id,
            name=repo.name,
            full_name=repo.full_name,
            html_url=repo.html_url,
            description=repo.description,
            language=repo.language,
            stargazers_count=repo.stargazers_count,
            forks_count=repo.forks_count,
            watchers_count=repo.watchers_count,
            size=repo.size,
            topics=list(repo.topics),
            license=repo.license,
            is_fork=repo.fork,
            created_at=repo.created_at,
            updated_at=repo.updated_at,
            fetch_generation=fetch_generation,
        )

    def __repr__(self) -> str:
        return f"<RepositorySnapshot(github_id={self.github_id}, full_name={self.full_name})>"
