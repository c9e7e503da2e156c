import logging
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from fastcrud import FastCRUD
from sqlalchemy import case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from cleanops.categories.models import Category
from cleanops.core.schemas import utcnow
from cleanops.products.models import CategoryStockCount, Product, ProductCreate
from cleanops.products.status import StockStatus, derive_stock_status
from cleanops.stock_movements.models import StockMovement

logger = logging.getLogger(__name__)


class ProductRepository:
    """
    Accès aux produits.

    `apply_stock_levels` est l'unique point d'écriture de la quantité et du
    seuil: le statut y est recalculé à chaque appel.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.crud = FastCRUD(Product)
        self.category_crud = FastCRUD(Category)

    async def get_active(self, product_id: int) -> Optional[Product]:
        result = await self.db.execute(
            select(Product).where(Product.id == product_id, Product.is_active == True)  # noqa: E712
        )
        return result.scalars().first()

    async def get_for_update(self, product_id: int) -> Optional[Product]:
        """Lit un produit actif en verrouillant sa ligne jusqu'à la fin de la transaction."""
        stmt = (
            select(Product)
            .where(Product.id == product_id, Product.is_active == True)  # noqa: E712
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()

    def apply_stock_levels(
        self,
        product: Product,
        quantity: Optional[Decimal] = None,
        alert_threshold: Optional[Decimal] = None,
    ) -> Product:
        if quantity is not None:
            product.quantity = quantity
        if alert_threshold is not None:
            product.alert_threshold = alert_threshold
        product.status = derive_stock_status(product.quantity, product.alert_threshold)
        product.last_updated = utcnow()
        self.db.add(product)
        return product

    async def create(self, product_data: ProductCreate) -> Product:
        product = Product(**product_data.model_dump(exclude={"quantity", "alert_threshold"}))
        self.apply_stock_levels(product, quantity=product_data.quantity, alert_threshold=product_data.alert_threshold)
        await self.db.flush()
        return product

    async def soft_delete(self, product: Product) -> None:
        product.is_active = False
        product.deleted_at = utcnow()
        self.db.add(product)
        await self.db.flush()

    async def code_exists(self, code: str, exclude_id: Optional[int] = None) -> bool:
        filters = {"code": code}
        if exclude_id is not None:
            filters["id__ne"] = exclude_id
        return await self.crud.exists(db=self.db, **filters)

    async def category_is_active(self, category_id: int) -> bool:
        return await self.category_crud.exists(db=self.db, id=category_id, is_active=True)

    async def list_products(
        self,
        category_id: Optional[int] = None,
        status: Optional[StockStatus] = None,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Product], int]:
        """Liste les produits actifs triés par nom, avec filtres optionnels."""
        conditions = [Product.is_active == True]  # noqa: E712
        if category_id is not None:
            conditions.append(Product.category_id == category_id)
        if status is not None:
            conditions.append(Product.status == status)
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(or_(
                func.lower(Product.name).like(pattern),
                func.lower(Product.code).like(pattern),
                func.lower(Product.description).like(pattern),
            ))

        total = await self.db.scalar(select(func.count(Product.id)).where(*conditions))
        result = await self.db.execute(
            select(Product).where(*conditions).order_by(Product.name, Product.id).offset(offset).limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def list_alerts(self) -> List[Product]:
        """Produits actifs en rupture puis en alerte, triés par nom."""
        rank = case((Product.status == StockStatus.OUT_OF_STOCK, 0), else_=1)
        result = await self.db.execute(
            select(Product)
            .where(Product.is_active == True, Product.status.in_([StockStatus.OUT_OF_STOCK, StockStatus.ALERT]))  # noqa: E712
            .order_by(rank, Product.name, Product.id)
        )
        return list(result.scalars().all())

    async def latest_movements(self, product_id: int, limit: int) -> List[StockMovement]:
        result = await self.db.execute(
            select(StockMovement)
            .where(StockMovement.product_id == product_id)
            .order_by(StockMovement.created_at.desc(), StockMovement.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def count_by_status(self) -> Dict[StockStatus, int]:
        result = await self.db.execute(
            select(Product.status, func.count(Product.id))
            .where(Product.is_active == True)  # noqa: E712
            .group_by(Product.status)
        )
        return {StockStatus(status): count for status, count in result.all()}

    async def count_by_category(self) -> List[CategoryStockCount]:
        result = await self.db.execute(
            select(Product.category_id, Category.name, func.count(Product.id))
            .outerjoin(Category, Category.id == Product.category_id)
            .where(Product.is_active == True)  # noqa: E712
            .group_by(Product.category_id, Category.name)
            .order_by(Category.name)
        )
        return [
            CategoryStockCount(category_id=category_id, category_name=name, count=count)
            for category_id, name, count in result.all()
        ]
