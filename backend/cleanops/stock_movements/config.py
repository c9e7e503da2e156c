"""
Configuration pour le module de gestion des stocks.
"""
from pydantic_settings import BaseSettings

class StockSettings(BaseSettings):
    """Paramètres de configuration pour la gestion des stocks."""

    # Paramètres de notification
    ENABLE_STOCK_ALERTS: bool = True

    # Attente maximale pour obtenir le verrou d'un produit (secondes)
    LOCK_TIMEOUT_SECONDS: float = 10.0

    # Nombre de mouvements joints au détail d'un produit
    PRODUCT_HISTORY_LIMIT: int = 20

    class Config:
        env_prefix = "STOCK_"
        case_sensitive = True
        extra = "ignore"

# Instance des paramètres
stock_settings = StockSettings()
