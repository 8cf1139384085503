import os
import sys
from logging.config import fileConfig

from sqlalchemy import create_engine, pool
from alembic import context

# -- make the project root importable --
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from foodshare.config import settings  # noqa: E402  loads .env, fails fast without DATABASE_URL
from foodshare.database import Base, sync_database_url  # noqa: E402
import foodshare.models  # noqa: E402,F401  registers the tables on Base.metadata

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# Alembic runs on the blocking driver (asyncpg -> psycopg2)
migration_url = sync_database_url(settings.DATABASE_URL)


def run_migrations_offline() -> None:
    """Emit SQL without a live connection."""
    context.configure(
        url=migration_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(migration_url, poolclass=pool.NullPool)

    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )
        with context.begin_transaction():
            context.run_migrations()
    engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
