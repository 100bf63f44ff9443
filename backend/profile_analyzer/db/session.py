from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from profile_analyzer.core.config import settings
from profile_analyzer.core.logging import mask_url_credentials
from profile_analyzer.db.base import Base
import logging

# Initialize logger for this module
logger = logging.getLogger(__name__)

# Dictionary to hold database connection arguments
connect_args = {}

# Check if we are using SQLite via the DATABASE_URL
if "sqlite" in settings.DATABASE_URL:
    # SQLite-specific: disable check_same_thread because
    # FastAPI handles requests across tasks, but aiosqlite manages connections safely
    connect_args = {"check_same_thread": False}

# Create the async SQLAlchemy engine
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    connect_args=connect_args,
)

# Session factory used to generate a new session for each request
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,   # Keep loaded objects usable after commit
    autoflush=False,          # Flushes are explicit in the reconciler
)

async def init_db() -> None:
    """
    Create any missing tables.

    Alembic owns the schema in production; this keeps the zero-config SQLite
    default usable straight after checkout.
    """
    import profile_analyzer.models  # noqa: F401  (register mappers)

    logger.info(f"Initializing database at {mask_url_credentials(settings.DATABASE_URL)}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

async def get_db() -> AsyncSession:
    """
    Dependency generator for FastAPI to provide a database session.
    Yields an AsyncSession and ensures it's closed after the request is processed.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            # Ensure the session is closed, returning the connection to the pool
            await session.close()
