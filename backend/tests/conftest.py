# Standard Library
from decimal import Decimal
from typing import AsyncGenerator, Awaitable, Callable, Optional

# Third-Party Libraries
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

# First-Party Libraries (Your project)
from cleanops.main import app
from cleanops.database import get_db_session, import_models
from cleanops.auth.security import get_password_hash, create_access_token
from cleanops.categories.models import Category
from cleanops.products.models import Product
from cleanops.products.repositories import ProductRepository
from cleanops.stock_movements.locks import ProductLockRegistry, get_product_locks
from cleanops.users.models import User, UserRole

# --- Fixtures de Base ---

@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """
    Base SQLite fichier propre à chaque test.

    Un fichier (et non :memory:) permet à plusieurs sessions concurrentes de
    partager les mêmes données, comme en production.
    """
    import_models()
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield test_engine
    await test_engine.dispose()

@pytest_asyncio.fixture(scope="function")
async def session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """Session utilisée par les fixtures pour préparer les données."""
    async with session_factory() as session:
        yield session

@pytest.fixture
def product_locks() -> ProductLockRegistry:
    """Registre de verrous neuf: les verrous asyncio ne survivent pas à la boucle du test."""
    return ProductLockRegistry(timeout=5)

@pytest_asyncio.fixture(scope="function")
async def test_client(
    session_factory: async_sessionmaker, product_locks: ProductLockRegistry
) -> AsyncGenerator[AsyncClient, None]:
    """Fournit un AsyncClient httpx; chaque requête reçoit sa propre session DB de test."""
    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_product_locks] = lambda: product_locks
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()

# --- Fixtures Utilisateur et Authentification ---

async def _create_user(session: AsyncSession, email: str, role: UserRole, is_active: bool = True) -> User:
    user = User(
        email=email,
        first_name="Test",
        last_name=role.value.capitalize(),
        role=role,
        is_active=is_active,
        password_hash=get_password_hash("testpassword"),
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user

def _auth_headers(user: User) -> dict[str, str]:
    access_token = create_access_token(data={"sub": str(user.id)})
    return {"Authorization": f"Bearer {access_token}"}

@pytest_asyncio.fixture(scope="function")
async def admin_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "admin@example.com", UserRole.ADMIN)

@pytest_asyncio.fixture(scope="function")
async def assistant_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "assistant@example.com", UserRole.ASSISTANT)

@pytest_asyncio.fixture(scope="function")
async def inactive_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "inactive@example.com", UserRole.ASSISTANT, is_active=False)

@pytest_asyncio.fixture(scope="function")
async def auth_headers_admin(admin_user: User) -> dict[str, str]:
    return _auth_headers(admin_user)

@pytest_asyncio.fixture(scope="function")
async def auth_headers_assistant(assistant_user: User) -> dict[str, str]:
    return _auth_headers(assistant_user)

# --- Fixtures Catalogue ---

@pytest_asyncio.fixture(scope="function")
async def test_category(db_session: AsyncSession) -> Category:
    category = Category(name="Détergents", description="Produits de nettoyage")
    db_session.add(category)
    await db_session.commit()
    await db_session.refresh(category)
    return category

ProductFactory = Callable[..., Awaitable[Product]]

@pytest_asyncio.fixture(scope="function")
async def make_product(db_session: AsyncSession) -> ProductFactory:
    """Fabrique de produits: le statut est calculé par le dépôt, comme en production."""
    counter = {"n": 0}

    async def _make(
        name: Optional[str] = None,
        quantity: str = "10",
        alert_threshold: str = "2",
        category_id: Optional[int] = None,
        code: Optional[str] = None,
    ) -> Product:
        counter["n"] += 1
        product = Product(
            name=name or f"Produit {counter['n']}",
            code=code,
            unit="litre",
            category_id=category_id,
        )
        ProductRepository(db_session).apply_stock_levels(
            product, quantity=Decimal(quantity), alert_threshold=Decimal(alert_threshold)
        )
        await db_session.commit()
        await db_session.refresh(product)
        return product

    return _make

@pytest_asyncio.fixture(scope="function")
async def test_product(make_product: ProductFactory) -> Product:
    """Produit avec 10 unités en stock et un seuil d'alerte à 2."""
    return await make_product(name="Javel 5L", quantity="10", alert_threshold="2", code="JAV-5L")
