"""
Services du registre des mouvements de stock.

`StockAdjustmentService` est le seul code qui modifie la quantité d'un produit
après sa création. Chaque ajustement verrouille le produit, écrit la ligne de
mouvement et met à jour le produit dans une seule transaction; les
notifications sont émises une fois le verrou relâché.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, Optional, Type

from fastcrud import FastCRUD
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cleanops.categories.models import Category
from cleanops.core.schemas import PaginatedResponse, to_naive_utc
from cleanops.notifications.service import NotificationService
from cleanops.products.exceptions import ProductError, ProductNotFoundException
from cleanops.products.models import Product, ProductRead
from cleanops.products.repositories import ProductRepository
from cleanops.products.status import ALERT_STATUSES, StockStatus
from cleanops.stock_movements.config import StockSettings
from cleanops.stock_movements.constants import (
    ERROR_DESTINATION_REQUIRED,
    ERROR_QUANTITY_POSITIVE,
    ERROR_QUANTITY_TOO_LARGE,
    MAX_STOCK_QUANTITY,
)
from cleanops.stock_movements.exceptions import (
    InsufficientStockError,
    StockError,
    StockTransactionError,
    StockValidationError,
)
from cleanops.stock_movements.locks import ProductLockRegistry
from cleanops.stock_movements.models import MovementType, StockMovement, StockMovementRead
from cleanops.stock_movements.schemas import (
    AlertProduct,
    CategorySummary,
    ProductSummary,
    StockAdjustmentResult,
    StockAlerts,
    StockMovementDetail,
    UserSummary,
)
from cleanops.users.models import User, UserRead

logger = logging.getLogger(__name__)


class StockAdjustmentService:
    def __init__(
        self,
        db: AsyncSession,
        product_repo: ProductRepository,
        locks: ProductLockRegistry,
        notifier: NotificationService,
        settings: StockSettings,
    ):
        self.db = db
        self.product_repo = product_repo
        self.locks = locks
        self.notifier = notifier
        self.settings = settings

    async def record_entry(
        self,
        product_id: int,
        quantity: Decimal,
        actor: UserRead,
        source: Optional[str] = None,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> StockAdjustmentResult:
        """Enregistre une entrée de stock: la quantité du produit augmente de `quantity`."""
        self._validate_quantity(quantity)
        result = await self._adjust(
            product_id=product_id,
            movement_type=MovementType.ENTRY,
            quantity=Decimal(quantity),
            actor=actor,
            source=source,
            reference=reference,
            notes=notes,
        )
        await self._notify(result, actor)
        return result

    async def record_exit(
        self,
        product_id: int,
        quantity: Decimal,
        destination: Optional[str],
        actor: UserRead,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> StockAdjustmentResult:
        """
        Enregistre une sortie de stock.

        Quantité et destination sont validées avant toute lecture. La sortie est
        refusée, sans aucune écriture, si elle dépasse la quantité disponible.
        """
        self._validate_quantity(quantity)
        if destination is None or not destination.strip():
            raise StockValidationError("destination", ERROR_DESTINATION_REQUIRED)

        result = await self._adjust(
            product_id=product_id,
            movement_type=MovementType.EXIT,
            quantity=Decimal(quantity),
            actor=actor,
            destination=destination.strip(),
            reference=reference,
            notes=notes,
        )
        await self._notify(result, actor)
        return result

    @staticmethod
    def _validate_quantity(quantity: Optional[Decimal]) -> None:
        if quantity is None or Decimal(quantity) <= 0:
            raise StockValidationError("quantity", ERROR_QUANTITY_POSITIVE)

    async def _adjust(
        self,
        product_id: int,
        movement_type: MovementType,
        quantity: Decimal,
        actor: UserRead,
        source: Optional[str] = None,
        destination: Optional[str] = None,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> StockAdjustmentResult:
        async with self.locks.hold(product_id):
            try:
                product = await self.product_repo.get_for_update(product_id)
                if product is None:
                    raise ProductNotFoundException(product_id)

                before = product.quantity
                if movement_type == MovementType.EXIT:
                    if quantity > before:
                        logger.warning(
                            f"[StockAdjustmentService] Stock insuffisant pour le produit {product_id}: "
                            f"demandé {quantity}, disponible {before}"
                        )
                        raise InsufficientStockError(product_id=product_id, requested=quantity, available=before)
                    after = before - quantity
                else:
                    after = before + quantity
                    if after > MAX_STOCK_QUANTITY:
                        logger.warning(
                            f"[StockAdjustmentService] Entrée refusée pour le produit {product_id}: "
                            f"{before} + {quantity} dépasse {MAX_STOCK_QUANTITY}"
                        )
                        raise StockValidationError("quantity", ERROR_QUANTITY_TOO_LARGE)

                movement = StockMovement(
                    product_id=product_id,
                    type=movement_type,
                    quantity=quantity,
                    quantity_before=before,
                    quantity_after=after,
                    source=source,
                    destination=destination,
                    reference=reference,
                    notes=notes,
                    user_id=actor.id,
                )
                self.db.add(movement)
                self.product_repo.apply_stock_levels(product, quantity=after)
                await self.db.flush()
                await self.db.commit()
            except (StockError, ProductError):
                await self.db.rollback()
                raise
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.error(f"[StockAdjustmentService] Transaction annulée pour le produit {product_id}: {e}", exc_info=True)
                raise StockTransactionError() from e

            result = StockAdjustmentResult(
                movement=StockMovementRead.model_validate(movement),
                product=ProductRead.model_validate(product),
            )

        logger.info(
            f"[StockAdjustmentService] {movement_type.value} de {quantity} sur le produit {product_id} "
            f"par l'utilisateur {actor.id}: {before} -> {after}"
        )
        return result

    async def _notify(self, result: StockAdjustmentResult, actor: UserRead) -> None:
        try:
            await self.notifier.emit_movement(result.movement, result.product, actor)
        except Exception as e:
            logger.error(f"[StockAdjustmentService] Notification de mouvement non émise: {e}", exc_info=True)

        if (
            self.settings.ENABLE_STOCK_ALERTS
            and result.movement.type == MovementType.EXIT
            and result.product.status in ALERT_STATUSES
        ):
            try:
                await self.notifier.emit_stock_alert(result.product)
            except Exception as e:
                logger.error(f"[StockAdjustmentService] Alerte de stock non émise: {e}", exc_info=True)


class StockLedgerService:
    """Consultation du registre: historique des mouvements et produits en alerte."""

    def __init__(self, db: AsyncSession, product_repo: ProductRepository):
        self.db = db
        self.product_repo = product_repo
        self.crud = FastCRUD(StockMovement)

    async def _summaries(self, model: Type, schema: Type, ids: Iterable[Optional[int]]) -> Dict[int, object]:
        """Charge en une requête les résumés des lignes référencées, indexés par ID."""
        wanted = {i for i in ids if i is not None}
        if not wanted:
            return {}
        columns = [getattr(model, name) for name in schema.model_fields]
        result = await self.db.execute(select(*columns).where(model.id.in_(wanted)))
        return {row.id: schema(**row._mapping) for row in result.all()}

    async def list_movements(
        self,
        page: int,
        limit: int,
        product_id: Optional[int] = None,
        movement_type: Optional[MovementType] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> PaginatedResponse[StockMovementDetail]:
        filters = {}
        if product_id is not None:
            filters["product_id"] = product_id
        if movement_type is not None:
            filters["type"] = movement_type
        if start_date is not None:
            filters["created_at__gte"] = to_naive_utc(start_date)
        if end_date is not None:
            filters["created_at__lte"] = to_naive_utc(end_date)

        result = await self.crud.get_multi(
            db=self.db,
            offset=(page - 1) * limit,
            limit=limit,
            schema_to_select=StockMovementRead,
            return_as_model=True,
            return_total_count=True,
            sort_columns=["created_at", "id"],
            sort_orders=["desc", "desc"],
            **filters,
        )
        movements = result["data"]
        # Produits supprimés logiquement inclus: l'historique reste lisible
        products = await self._summaries(Product, ProductSummary, (m.product_id for m in movements))
        users = await self._summaries(User, UserSummary, (m.user_id for m in movements))
        items = [
            StockMovementDetail(
                **m.model_dump(), product=products.get(m.product_id), user=users.get(m.user_id)
            )
            for m in movements
        ]
        return PaginatedResponse[StockMovementDetail].build(
            items=items, total=result["total_count"], page=page, limit=limit
        )

    async def get_alerts(self) -> StockAlerts:
        """Produits actifs en rupture puis en alerte, avec leur catégorie."""
        products = await self.product_repo.list_alerts()
        categories = await self._summaries(Category, CategorySummary, (p.category_id for p in products))
        rupture_count = sum(1 for p in products if p.status == StockStatus.OUT_OF_STOCK)
        return StockAlerts(
            total=len(products),
            rupture_count=rupture_count,
            alert_count=len(products) - rupture_count,
            products=[
                AlertProduct(**ProductRead.model_validate(p).model_dump(), category=categories.get(p.category_id))
                for p in products
            ],
        )
