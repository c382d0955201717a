from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from cms.config import settings
import logging

logger = logging.getLogger(__name__)


def build_engine(database_url: str, environment: str = "development") -> AsyncEngine:
    """Create the async engine with pool settings suited to the backend."""
    if database_url.startswith("sqlite"):
        # In-memory databases must share one connection to be visible across sessions
        if ":memory:" in database_url:
            return create_async_engine(
                database_url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_async_engine(database_url, connect_args={"check_same_thread": False})

    # Environment-based configurations
    if environment == "production":
        return create_async_engine(
            database_url,
            pool_size=20,
            max_overflow=50,
            pool_timeout=60,
            pool_recycle=1800,
        )
    return create_async_engine(
        database_url,
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
        pool_pre_ping=True,
    )


engine = build_engine(settings.database_url, settings.environment)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autoflush=False,
    expire_on_commit=False,
)

Base = declarative_base()


async def create_tables() -> None:
    """Create all tables known to the metadata (development convenience)."""
    # Model modules register themselves on Base.metadata when imported
    import cms.models  # noqa: F401
    import cms.plugins.concerts.models  # noqa: F401
    import cms.plugins.photos.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created (if not existing).")


async def get_db():
    async with AsyncSessionLocal() as db:
        try:
            yield db
        except Exception as e:
            logger.error("Database session error: %s", e)
            raise
