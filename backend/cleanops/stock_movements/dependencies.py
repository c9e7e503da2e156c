import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cleanops.database import get_db_session
from cleanops.notifications.dependencies import get_notification_service
from cleanops.notifications.service import NotificationService
from cleanops.products.dependencies import ProductRepositoryDep
from cleanops.stock_movements.config import StockSettings, stock_settings
from cleanops.stock_movements.locks import ProductLockRegistry, get_product_locks
from cleanops.stock_movements.service import StockAdjustmentService, StockLedgerService

logger = logging.getLogger(__name__)

SessionDep = Annotated[AsyncSession, Depends(get_db_session)]

def get_stock_settings() -> StockSettings:
    return stock_settings

def get_stock_adjustment_service(
    session: SessionDep,
    product_repo: ProductRepositoryDep,
    locks: Annotated[ProductLockRegistry, Depends(get_product_locks)],
    notifier: Annotated[NotificationService, Depends(get_notification_service)],
    settings: Annotated[StockSettings, Depends(get_stock_settings)],
) -> StockAdjustmentService:
    """Fournit le service d'ajustement de stock avec ses collaborateurs."""
    return StockAdjustmentService(
        db=session, product_repo=product_repo, locks=locks, notifier=notifier, settings=settings
    )

def get_stock_ledger_service(session: SessionDep, product_repo: ProductRepositoryDep) -> StockLedgerService:
    return StockLedgerService(db=session, product_repo=product_repo)

StockAdjustmentServiceDep = Annotated[StockAdjustmentService, Depends(get_stock_adjustment_service)]
StockLedgerServiceDep = Annotated[StockLedgerService, Depends(get_stock_ledger_service)]
