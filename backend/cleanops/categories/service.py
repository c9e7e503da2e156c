import logging

from cleanops.categories.exceptions import (
    CategoryInUseException,
    CategoryNotFoundException,
    DuplicateCategoryNameException,
)
from cleanops.categories.interfaces.repositories import AbstractCategoryRepository
from cleanops.categories.models import CategoryCreate, CategoryRead, CategoryReadWithCount, CategoryUpdate
from cleanops.core.schemas import PaginatedResponse

logger = logging.getLogger(__name__)


class CategoryService:
    """Service applicatif pour la gestion des catégories via Repository."""

    def __init__(self, repository: AbstractCategoryRepository):
        self.repository = repository

    async def list_categories(self, page: int, limit: int) -> PaginatedResponse[CategoryReadWithCount]:
        """Liste paginée des catégories actives, triées par nom."""
        logger.debug(f"[CategoryService] Liste des catégories: page={page}, limit={limit}")
        categories, total = await self.repository.list(limit=limit, offset=(page - 1) * limit)
        return PaginatedResponse[CategoryReadWithCount].build(items=categories, total=total, page=page, limit=limit)

    async def get_category(self, category_id: int) -> CategoryRead:
        category = await self.repository.get_by_id(category_id=category_id)
        if not category:
            raise CategoryNotFoundException(category_id)
        return category

    async def create_category(self, category_data: CategoryCreate) -> CategoryRead:
        """Crée une nouvelle catégorie (nom unique)."""
        logger.info(f"[CategoryService] Création catégorie: {category_data.name}")
        if await self.repository.get_by_name(name=category_data.name):
            raise DuplicateCategoryNameException(category_data.name)
        created = await self.repository.create(category_data=category_data)
        logger.info(f"[CategoryService] Catégorie ID {created.id} créée.")
        return created

    async def update_category(self, category_id: int, category_data: CategoryUpdate) -> CategoryRead:
        logger.info(f"[CategoryService] Mise à jour catégorie ID: {category_id}")
        if category_data.name:
            existing = await self.repository.get_by_name(name=category_data.name)
            if existing and existing.id != category_id:
                raise DuplicateCategoryNameException(category_data.name)

        updated = await self.repository.update(category_id=category_id, category_data=category_data)
        if updated is None:
            raise CategoryNotFoundException(category_id)
        return updated

    async def delete_category(self, category_id: int) -> None:
        """
        Supprime une catégorie.

        Refusé tant que des produits (y compris supprimés logiquement) y sont rattachés.
        """
        logger.info(f"[CategoryService] Suppression catégorie ID: {category_id}")
        if await self.repository.get_by_id(category_id=category_id) is None:
            raise CategoryNotFoundException(category_id)
        if await self.repository.has_products(category_id=category_id):
            logger.warning(f"[CategoryService] Catégorie {category_id} encore utilisée, suppression refusée.")
            raise CategoryInUseException(category_id)
        await self.repository.delete(category_id=category_id)
        logger.info(f"[CategoryService] Catégorie ID {category_id} supprimée.")
