import asyncio
import sys
import os
from datetime import datetime, timezone

# Add project root/backend to path
sys.path.append(os.path.join(os.getcwd(), "backend"))

from profile_analyzer.db.session import AsyncSessionLocal, init_db
from profile_analyzer.models.analysis_result import AnalysisResult
from profile_analyzer.models.profile import Profile
from profile_analyzer.schemas.github import GitHubRepo, GitHubUser
from profile_analyzer.services.reconciler import PersistenceReconciler
from sqlalchemy import select

DEMO_USER = GitHubUser(
    login="dhruvgajera",
    name="Dhruv Gajera",
    avatar_url="https://avatars.githubusercontent.com/u/12345678?v=4",
    bio="Node.js developer",
    location="India",
    public_repos=2,
    followers=100,
    following=10,
    html_url="https://github.com/dhruvgajera",
    created_at=datetime(2021, 1, 1, tzinfo=timezone.utc),
)

DEMO_REPOS = [
    GitHubRepo(
        id=1,
        name="vault-app",
        full_name="dhruvgajera/vault-app",
        html_url="https://github.com/dhruvgajera/vault-app",
        language="TypeScript",
        stargazers_count=50,
        forks_count=10,
        watchers_count=20,
        size=1234,
        topics=["security", "node"],
        created_at=datetime(2023, 3, 1, tzinfo=timezone.utc),
        updated_at=datetime(2025, 6, 1, tzinfo=timezone.utc),
    ),
    GitHubRepo(
        id=2,
        name="chat-app",
        full_name="dhruvgajera/chat-app",
        html_url="https://github.com/dhruvgajera/chat-app",
        language="JavaScript",
        stargazers_count=70,
        forks_count=15,
        watchers_count=25,
        size=4321,
        topics=["realtime", "socket.io"],
        created_at=datetime(2022, 9, 1, tzinfo=timezone.utc),
        updated_at=datetime(2025, 5, 1, tzinfo=timezone.utc),
    ),
]


async def seed():
    print("Seeding demo data...")
    await init_db()

    async with AsyncSessionLocal() as session:
        profile = await PersistenceReconciler(session).reconcile(DEMO_USER, DEMO_REPOS)
        print(f"Seeded profile {profile.username} ({profile.id})")

    # Read back
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(AnalysisResult)
            .join(Profile, AnalysisResult.profile_id == Profile.id)
            .where(Profile.username == DEMO_USER.login)
        )
        analysis = result.scalar_one_or_none()

        if analysis is None:
            print("FAILURE: analysis result missing after seeding.")
            exit(1)

        print(f"Total stars: {analysis.total_stars}, top languages: {analysis.top_languages}")
        print("SUCCESS: demo data seeded.")

if __name__ == "__main__":
    asyncio.run(seed())
