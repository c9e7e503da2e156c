"""
Exceptions personnalisées pour le module des mouvements de stock.
"""
from decimal import Decimal

from cleanops.stock_movements.constants import ERROR_INSUFFICIENT_STOCK, ERROR_STOCK_TRANSACTION


class StockError(Exception):
    """Classe de base pour les exceptions liées au stock."""
    pass

class StockValidationError(StockError):
    """Levée lorsqu'un champ d'une demande de mouvement est invalide."""
    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")

class InsufficientStockError(StockError):
    """Levée lorsque la sortie demandée dépasse la quantité disponible."""
    def __init__(self, product_id: int, requested: Decimal, available: Decimal):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        self.message = f"{ERROR_INSUFFICIENT_STOCK}: {available}"
        super().__init__(self.message)

class StockTransactionError(StockError):
    """Levée lorsque la transaction de stock échoue (verrou, connexion, interblocage)."""
    def __init__(self, message: str = ERROR_STOCK_TRANSACTION):
        self.message = message
        super().__init__(self.message)
