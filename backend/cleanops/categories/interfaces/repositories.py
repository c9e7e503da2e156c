from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from cleanops.categories.models import Category, CategoryCreate, CategoryRead, CategoryReadWithCount, CategoryUpdate


class AbstractCategoryRepository(ABC):
    """Interface abstraite pour le repository des catégories."""

    @abstractmethod
    async def get_by_id(self, category_id: int) -> Optional[CategoryRead]:
        """Récupère une catégorie active par son ID (schéma Read)."""
        pass

    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[Category]:
        """Récupère une catégorie par son nom (modèle Table)."""
        pass

    @abstractmethod
    async def list(self, limit: int = 100, offset: int = 0) -> Tuple[List[CategoryReadWithCount], int]:
        """Liste les catégories actives avec leur nombre de produits."""
        pass

    @abstractmethod
    async def create(self, category_data: CategoryCreate) -> CategoryRead:
        pass

    @abstractmethod
    async def update(self, category_id: int, category_data: CategoryUpdate) -> Optional[CategoryRead]:
        pass

    @abstractmethod
    async def has_products(self, category_id: int) -> bool:
        """Indique si des produits (même supprimés) référencent encore la catégorie."""
        pass

    @abstractmethod
    async def delete(self, category_id: int) -> bool:
        pass
