from typing import List, Optional

from sqlmodel import SQLModel

from cleanops.products.models import ProductRead
from cleanops.stock_movements.models import StockMovementRead


class StockAdjustmentResult(SQLModel):
    """Résultat d'une entrée ou d'une sortie: le mouvement et le produit après validation."""
    movement: StockMovementRead
    product: ProductRead

# --- Résumés imbriqués dans les listes ---

class ProductSummary(SQLModel):
    id: int
    name: str
    code: Optional[str] = None
    unit: str

class UserSummary(SQLModel):
    id: int
    first_name: str
    last_name: str

class CategorySummary(SQLModel):
    id: int
    name: str

class StockMovementDetail(StockMovementRead):
    """Mouvement accompagné du produit concerné et de l'utilisateur qui l'a saisi."""
    product: Optional[ProductSummary] = None
    user: Optional[UserSummary] = None

class AlertProduct(ProductRead):
    category: Optional[CategorySummary] = None

class StockAlerts(SQLModel):
    total: int
    rupture_count: int
    alert_count: int
    products: List[AlertProduct] = []
