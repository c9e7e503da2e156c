from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import CheckConstraint
from sqlmodel import Field, SQLModel

from cleanops.core.schemas import utcnow
from cleanops.products.constants import DEFAULT_ALERT_THRESHOLD, DEFAULT_UNIT
from cleanops.products.status import StockStatus
from cleanops.stock_movements.models import StockMovementRead

# --- Modèle Product SQLModel ---

class ProductBase(SQLModel):
    name: str = Field(index=True, min_length=2, max_length=200)
    description: Optional[str] = Field(default=None)
    category_id: Optional[int] = Field(default=None, foreign_key="categories.id", index=True)
    code: Optional[str] = Field(default=None, unique=True, index=True, max_length=50)
    unit: str = Field(default=DEFAULT_UNIT, max_length=50)
    alert_threshold: Decimal = Field(default=DEFAULT_ALERT_THRESHOLD, ge=0, max_digits=10, decimal_places=2)
    unit_price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    location: Optional[str] = Field(default=None, max_length=200)
    supplier: Optional[str] = Field(default=None, max_length=200)

class Product(ProductBase, table=True):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_products_quantity_non_negative"),
        CheckConstraint("alert_threshold >= 0", name="ck_products_alert_threshold_non_negative"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    # quantity et status ne sont modifiés que via ProductRepository.apply_stock_levels
    quantity: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    status: StockStatus = Field(default=StockStatus.OUT_OF_STOCK, index=True)
    last_updated: datetime = Field(default_factory=utcnow, nullable=False)
    is_active: bool = Field(default=True, index=True)
    deleted_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False, sa_column_kwargs={"onupdate": utcnow})

# Schémas API pour Product
class ProductCreate(ProductBase):
    # Quantité initiale; ensuite seuls les mouvements de stock la modifient
    quantity: Decimal = Field(default=Decimal("0"), ge=0, max_digits=10, decimal_places=2)

class ProductUpdate(SQLModel):
    """Mise à jour partielle. La quantité et le statut ne sont pas modifiables ici."""
    name: Optional[str] = Field(default=None, min_length=2, max_length=200)
    description: Optional[str] = None
    category_id: Optional[int] = None
    code: Optional[str] = Field(default=None, max_length=50)
    unit: Optional[str] = Field(default=None, max_length=50)
    alert_threshold: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    unit_price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    location: Optional[str] = None
    supplier: Optional[str] = None

class ProductRead(ProductBase):
    id: int
    quantity: Decimal
    status: StockStatus
    last_updated: datetime
    is_active: bool
    created_at: datetime

class ProductReadWithHistory(ProductRead):
    movements: List[StockMovementRead] = []

class CategoryStockCount(SQLModel):
    category_id: Optional[int]
    category_name: Optional[str]
    count: int

class ProductStats(SQLModel):
    total: int
    ok: int
    alert: int
    out_of_stock: int
    by_category: List[CategoryStockCount] = []

# --- Fin Modèle Product SQLModel ---
