import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cleanops.core.schemas import PaginatedResponse
from cleanops.products.exceptions import (
    DuplicateProductCodeException,
    InvalidProductOperationException,
    ProductNotFoundException,
)
from cleanops.products.models import (
    ProductCreate,
    ProductRead,
    ProductReadWithHistory,
    ProductStats,
    ProductUpdate,
)
from cleanops.products.repositories import ProductRepository
from cleanops.products.status import StockStatus
from cleanops.stock_movements.locks import ProductLockRegistry
from cleanops.stock_movements.models import StockMovementRead

logger = logging.getLogger(__name__)

# Champs non nullables ignorés s'ils sont envoyés à null
_REQUIRED_FIELDS = ("name", "unit")


class ProductService:
    """Service applicatif du catalogue produits."""

    def __init__(
        self,
        db: AsyncSession,
        repository: ProductRepository,
        locks: ProductLockRegistry,
        history_limit: int = 20,
    ):
        self.db = db
        self.repository = repository
        self.locks = locks
        self.history_limit = history_limit

    async def _check_category(self, category_id: Optional[int]) -> None:
        if category_id is not None and not await self.repository.category_is_active(category_id):
            raise InvalidProductOperationException(f"Catégorie introuvable (ID: {category_id}).", field="category_id")

    async def _commit(self, code: Optional[str]) -> None:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"[ProductService] Contrainte d'intégrité violée: {e}")
            if code:
                raise DuplicateProductCodeException(code) from e
            raise

    async def create_product(self, product_data: ProductCreate) -> ProductRead:
        """Crée un produit; le statut est calculé à partir de la quantité initiale."""
        logger.info(f"[ProductService] Création produit: {product_data.name}")
        await self._check_category(product_data.category_id)
        if product_data.code and await self.repository.code_exists(product_data.code):
            raise DuplicateProductCodeException(product_data.code)

        product = await self.repository.create(product_data)
        await self._commit(product_data.code)
        logger.info(f"[ProductService] Produit ID {product.id} créé (statut {product.status.value}).")
        return ProductRead.model_validate(product)

    async def list_products(
        self,
        page: int,
        limit: int,
        category_id: Optional[int] = None,
        status: Optional[StockStatus] = None,
        search: Optional[str] = None,
    ) -> PaginatedResponse[ProductRead]:
        products, total = await self.repository.list_products(
            category_id=category_id,
            status=status,
            search=search.strip() if search else None,
            limit=limit,
            offset=(page - 1) * limit,
        )
        return PaginatedResponse[ProductRead].build(
            items=[ProductRead.model_validate(p) for p in products], total=total, page=page, limit=limit
        )

    async def get_product(self, product_id: int) -> ProductReadWithHistory:
        """Détail d'un produit avec ses derniers mouvements."""
        product = await self.repository.get_active(product_id)
        if product is None:
            raise ProductNotFoundException(product_id)
        movements = await self.repository.latest_movements(product_id, limit=self.history_limit)
        return ProductReadWithHistory(
            **ProductRead.model_validate(product).model_dump(),
            movements=[StockMovementRead.model_validate(m) for m in movements],
        )

    async def update_product(self, product_id: int, product_data: ProductUpdate) -> ProductRead:
        """
        Met à jour les attributs d'un produit.

        La quantité ne change jamais ici; un nouveau seuil d'alerte entraîne le
        recalcul du statut. La lecture se fait sous le verrou du produit pour que
        le statut soit dérivé de la quantité courante.
        """
        logger.info(f"[ProductService] Mise à jour produit ID: {product_id}")
        async with self.locks.hold(product_id):
            product = await self.repository.get_for_update(product_id)
            if product is None:
                raise ProductNotFoundException(product_id)

            updates = product_data.model_dump(exclude_unset=True)
            alert_threshold = updates.pop("alert_threshold", None)
            if "category_id" in updates:
                await self._check_category(updates["category_id"])
            code = updates.get("code")
            if code and await self.repository.code_exists(code, exclude_id=product_id):
                raise DuplicateProductCodeException(code)

            for key, value in updates.items():
                if value is None and key in _REQUIRED_FIELDS:
                    continue
                setattr(product, key, value)
            self.repository.apply_stock_levels(product, alert_threshold=alert_threshold)
            await self._commit(code)
            return ProductRead.model_validate(product)

    async def delete_product(self, product_id: int) -> None:
        logger.info(f"[ProductService] Suppression logique du produit ID: {product_id}")
        product = await self.repository.get_active(product_id)
        if product is None:
            raise ProductNotFoundException(product_id)
        await self.repository.soft_delete(product)
        await self.db.commit()

    async def get_product_stats(self) -> ProductStats:
        by_status = await self.repository.count_by_status()
        return ProductStats(
            total=sum(by_status.values()),
            ok=by_status.get(StockStatus.OK, 0),
            alert=by_status.get(StockStatus.ALERT, 0),
            out_of_stock=by_status.get(StockStatus.OUT_OF_STOCK, 0),
            by_category=await self.repository.count_by_category(),
        )
