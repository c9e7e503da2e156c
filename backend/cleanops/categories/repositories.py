import logging
from typing import List, Optional, Tuple

from fastcrud import FastCRUD
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cleanops.categories.exceptions import DuplicateCategoryNameException
from cleanops.categories.interfaces.repositories import AbstractCategoryRepository
from cleanops.categories.models import Category, CategoryCreate, CategoryRead, CategoryReadWithCount, CategoryUpdate
from cleanops.products.models import Product

logger = logging.getLogger(__name__)


class SQLAlchemyCategoryRepository(AbstractCategoryRepository):
    """Implémentation SQLAlchemy du repository des catégories avec FastCRUD."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.crud = FastCRUD(Category)
        self.product_crud = FastCRUD(Product)

    async def get_by_id(self, category_id: int) -> Optional[CategoryRead]:
        logger.debug(f"[CategoryRepository] Lecture catégorie ID: {category_id}")
        category = await self.crud.get(
            db=self.db,
            schema_to_select=CategoryRead,
            return_as_model=True,
            id=category_id,
            is_active=True,
        )
        if not category:
            logger.warning(f"[CategoryRepository] Catégorie introuvable ID: {category_id}")
        return category

    async def get_by_name(self, name: str) -> Optional[Category]:
        result = await self.db.execute(select(Category).where(Category.name == name))
        return result.scalars().first()

    async def list(self, limit: int = 100, offset: int = 0) -> Tuple[List[CategoryReadWithCount], int]:
        logger.debug(f"[CategoryRepository] Liste des catégories: limit={limit}, offset={offset}")
        counts = (
            select(Product.category_id, func.count(Product.id).label("product_count"))
            .where(Product.is_active == True)  # noqa: E712
            .group_by(Product.category_id)
            .subquery()
        )
        stmt = (
            select(Category, func.coalesce(counts.c.product_count, 0))
            .outerjoin(counts, counts.c.category_id == Category.id)
            .where(Category.is_active == True)  # noqa: E712
            .order_by(Category.name)
            .offset(offset)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        items = [
            CategoryReadWithCount(**CategoryRead.model_validate(category).model_dump(), product_count=count)
            for category, count in result.all()
        ]
        total = await self.crud.count(db=self.db, is_active=True)
        return items, total

    async def create(self, category_data: CategoryCreate) -> CategoryRead:
        logger.debug(f"[CategoryRepository] Création catégorie: {category_data.name}")
        try:
            # FastCRUD commit par défaut
            created = await self.crud.create(
                db=self.db, object=category_data, schema_to_select=CategoryRead, return_as_model=True
            )
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"[CategoryRepository] Contrainte d'intégrité à la création de {category_data.name}: {e}")
            raise DuplicateCategoryNameException(category_data.name) from e
        return created

    async def update(self, category_id: int, category_data: CategoryUpdate) -> Optional[CategoryRead]:
        logger.debug(f"[CategoryRepository] Mise à jour catégorie ID: {category_id}")
        category = await self.db.get(Category, category_id)
        if category is None or not category.is_active:
            return None
        for key, value in category_data.model_dump(exclude_unset=True).items():
            if key == "name" and value is None:
                continue
            setattr(category, key, value)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"[CategoryRepository] Contrainte d'intégrité à la mise à jour de {category_id}: {e}")
            raise DuplicateCategoryNameException(category_data.name or "<inconnu>") from e
        await self.db.refresh(category)
        return CategoryRead.model_validate(category)

    async def has_products(self, category_id: int) -> bool:
        return await self.product_crud.exists(db=self.db, category_id=category_id)

    async def delete(self, category_id: int) -> bool:
        logger.debug(f"[CategoryRepository] Suppression catégorie ID: {category_id}")
        category = await self.db.get(Category, category_id)
        if category is None:
            return False
        await self.db.delete(category)
        await self.db.commit()
        return True
