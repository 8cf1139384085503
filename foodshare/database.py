from sqlalchemy import create_engine, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from foodshare.config import settings

DATABASE_URL = settings.DATABASE_URL


def sync_database_url(url: str) -> str:
    """Map an async driver URL onto its blocking counterpart (Celery, Alembic)."""
    return (
        url.replace("postgresql+asyncpg", "postgresql+psycopg2")
        .replace("sqlite+aiosqlite", "sqlite")
    )


# Async engine for FastAPI
engine = create_async_engine(DATABASE_URL, echo=settings.SQL_ECHO, pool_pre_ping=True)

# Sync engine for Celery
sync_engine = create_engine(sync_database_url(DATABASE_URL), echo=settings.SQL_ECHO, pool_pre_ping=True)

async_session_factory = async_sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)

sync_session_factory = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=sync_engine,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def init_db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# Dependency to get async session
async def get_db():
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


# Dependency to get sync session for Celery
def get_db_sync():
    db = sync_session_factory()
    try:
        yield db
    finally:
        db.close()


async def check_db_connectivity(session: AsyncSession) -> bool:
    try:
        await session.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
