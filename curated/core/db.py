from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from curated.core.config import settings
from curated.db.base import Base

# Асинхронный движок
engine = create_async_engine(settings.database_url, future=True, echo=settings.sql_echo)

# Сессии
SessionLocal = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


# Функция для dependency injection в FastAPI
async def get_db():
    async with SessionLocal() as session:
        yield session


async def init_models() -> None:
    """Создание таблиц без миграций (локальный запуск)"""
    import curated.db.models  # noqa: F401  регистрирует модели в metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
