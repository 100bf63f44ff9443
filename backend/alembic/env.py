import asyncio
import logging
import os
import sys
from logging.config import fileConfig

# Make profile_analyzer importable when alembic runs from backend/
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import async_engine_from_config

import profile_analyzer.models  # noqa: F401
from alembic import context
from profile_analyzer.core.config import settings
from profile_analyzer.core.logging import mask_url_credentials
from profile_analyzer.db.base import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

target_metadata = Base.metadata

# The application settings are the single source of the database URL
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

MAX_CONNECT_ATTEMPTS = 5


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,  # SQLite cannot ALTER most constraints in place
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=True,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Connect with the async driver, retrying while the database comes up."""
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    try:
        for attempt in range(1, MAX_CONNECT_ATTEMPTS + 1):
            try:
                async with connectable.connect() as connection:
                    await connection.run_sync(do_run_migrations)
                return
            except OperationalError:
                if attempt == MAX_CONNECT_ATTEMPTS:
                    raise
                delay_s = 2 ** (attempt - 1)
                logger.warning(
                    f"Could not reach {mask_url_credentials(settings.DATABASE_URL)} "
                    f"(attempt {attempt}/{MAX_CONNECT_ATTEMPTS}), retrying in {delay_s}s"
                )
                await asyncio.sleep(delay_s)
    finally:
        await connectable.dispose()


def run_migrations_online() -> None:
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
