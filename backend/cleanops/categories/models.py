from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from cleanops.core.schemas import utcnow

# --- Modèle de base pour les catégories ---
class CategoryBase(SQLModel):
    """Modèle de base pour les catégories."""
    name: str = Field(index=True, unique=True, min_length=2, max_length=100)
    description: Optional[str] = Field(default=None)

# --- Modèle Category (Table) ---
class Category(CategoryBase, table=True):
    """Modèle de table pour les catégories."""
    __tablename__ = "categories"

    id: Optional[int] = Field(default=None, primary_key=True)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False, sa_column_kwargs={"onupdate": utcnow})

# --- Schémas API ---
class CategoryCreate(CategoryBase):
    """Schéma pour la création d'une catégorie."""
    pass

class CategoryRead(CategoryBase):
    """Schéma pour la lecture d'une catégorie."""
    id: int
    is_active: bool
    created_at: datetime

class CategoryReadWithCount(CategoryRead):
    """Catégorie avec le nombre de produits actifs rattachés."""
    product_count: int = 0

class CategoryUpdate(SQLModel):
    """Schéma pour la mise à jour d'une catégorie."""
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    description: Optional[str] = None
