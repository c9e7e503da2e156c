from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint
from sqlmodel import Field, SQLModel

from cleanops.core.schemas import utcnow


class MovementType(str, Enum):
    ENTRY = "ENTRY"
    EXIT = "EXIT"

# --- Modèle StockMovement SQLModel ---
# Historique immuable: aucune mise à jour ni suppression n'est exposée.

class StockMovementBase(SQLModel):
    product_id: int = Field(foreign_key="products.id", index=True)
    type: MovementType = Field(index=True)
    quantity: Decimal = Field(max_digits=10, decimal_places=2)
    quantity_before: Decimal = Field(max_digits=10, decimal_places=2)
    quantity_after: Decimal = Field(max_digits=10, decimal_places=2)
    source: Optional[str] = Field(default=None, max_length=255)
    destination: Optional[str] = Field(default=None, max_length=255)
    reference: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = Field(default=None)
    user_id: int = Field(foreign_key="users.id", index=True)

class StockMovement(StockMovementBase, table=True):
    __tablename__ = "stock_movements"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_stock_movements_quantity_positive"),
        CheckConstraint("quantity_after >= 0", name="ck_stock_movements_quantity_after_non_negative"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)

# Schémas API pour StockMovement
class StockEntryCreate(SQLModel):
    product_id: int = Field(ge=1)
    quantity: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    source: Optional[str] = Field(default=None, max_length=255)
    reference: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = None

class StockExitCreate(SQLModel):
    product_id: int = Field(ge=1)
    quantity: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    # Obligatoire: vérifié par le service pour renvoyer une erreur de champ explicite
    destination: Optional[str] = Field(default=None, max_length=255)
    reference: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = None

class StockMovementRead(StockMovementBase):
    id: int
    created_at: datetime

# --- Fin Modèle StockMovement SQLModel ---
