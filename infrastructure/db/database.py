"""
Database configuration and session management for async SQLAlchemy.
"""
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
import os

# Import all models to ensure they're registered in the same registry
# This must happen before creating the engine
from infrastructure.db.models import (  # noqa: F401
    Base,
    CustomerModel,
    SaleModel,
    InstallmentModel,
    PaymentModel,
    ProductModel,
    NotificationModel,
)

# Local database file by default; point DATABASE_URL at postgresql+asyncpg://... to use a server
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./sales_management.db")

# Create async engine
engine = create_async_engine(
    DATABASE_URL,
    echo=os.getenv("DB_ECHO", "false").lower() == "true",
    future=True,
)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def init_models(bind: AsyncEngine = engine) -> None:
    """Create missing tables. Existing tables are left untouched."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db_session() -> AsyncSession:
    """
    Dependency function to get database session.
    Use this in FastAPI route dependencies.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
