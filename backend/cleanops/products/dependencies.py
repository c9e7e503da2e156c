from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cleanops.database import get_db_session
from cleanops.products.repositories import ProductRepository
from cleanops.products.service import ProductService
from cleanops.stock_movements.config import stock_settings
from cleanops.stock_movements.locks import ProductLockRegistry, get_product_locks

SessionDep = Annotated[AsyncSession, Depends(get_db_session)]

def get_product_repository(session: SessionDep) -> ProductRepository:
    return ProductRepository(db_session=session)

ProductRepositoryDep = Annotated[ProductRepository, Depends(get_product_repository)]

def get_product_service(
    session: SessionDep,
    repository: ProductRepositoryDep,
    locks: Annotated[ProductLockRegistry, Depends(get_product_locks)],
) -> ProductService:
    """Fournit une instance du service produits."""
    return ProductService(
        db=session, repository=repository, locks=locks, history_limit=stock_settings.PRODUCT_HISTORY_LIMIT
    )

ProductServiceDep = Annotated[ProductService, Depends(get_product_service)]
