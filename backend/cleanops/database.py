import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from cleanops.config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL
# Heroku/Azure fournissent parfois "postgres://", SQLAlchemy exige le driver explicite
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql+asyncpg://", 1)

engine_kwargs = {"echo": settings.DB_ECHO_LOG}
if not DATABASE_URL.startswith("sqlite"):
    engine_kwargs.update(pool_size=settings.DB_POOL_SIZE, max_overflow=settings.DB_MAX_OVERFLOW)

# Moteur de base de données asynchrone
engine = create_async_engine(DATABASE_URL, **engine_kwargs)

# expire_on_commit=False: les objets restent lisibles après commit (réponses API)
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

logger.info("Moteur et Session Factory SQLAlchemy Async configurés.")

async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that provides an async database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            # Pas de commit ici: les services contrôlent leurs transactions.
        except Exception as e:
            logger.error(f"Erreur durant la session DB, rollback: {e}", exc_info=True)
            await session.rollback()
            raise
        finally:
            await session.close()
            logger.debug("Session DB fermée.")

def import_models() -> None:
    """Importe les modèles de table pour les enregistrer dans SQLModel.metadata."""
    from cleanops.users import models as _users  # noqa: F401
    from cleanops.categories import models as _categories  # noqa: F401
    from cleanops.products import models as _products  # noqa: F401
    from cleanops.stock_movements import models as _movements  # noqa: F401
    from cleanops.notifications import models as _notifications  # noqa: F401

async def create_tables() -> None:
    """Crée toutes les tables définies dans SQLModel.metadata."""
    import_models()
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
