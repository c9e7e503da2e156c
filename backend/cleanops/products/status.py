"""
Calcul du statut de stock d'un produit.
"""
from decimal import Decimal
from enum import Enum


class StockStatus(str, Enum):
    OK = "OK"
    ALERT = "ALERT"
    OUT_OF_STOCK = "OUT_OF_STOCK"


# Statuts qui déclenchent une alerte de stock
ALERT_STATUSES = (StockStatus.ALERT, StockStatus.OUT_OF_STOCK)


def derive_stock_status(quantity: Decimal, alert_threshold: Decimal) -> StockStatus:
    """
    Calcule le statut du stock à partir de la quantité et du seuil d'alerte.

    Le seuil est inclusif: une quantité égale au seuil est en ALERT.
    Une quantité nulle ou négative est toujours en rupture, quel que soit le seuil.

    Args:
        quantity: Quantité disponible en stock
        alert_threshold: Seuil d'alerte du produit

    Returns:
        StockStatus: OK, ALERT ou OUT_OF_STOCK
    """
    quantity = Decimal(quantity or 0)
    alert_threshold = Decimal(alert_threshold or 0)
    if quantity <= 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= alert_threshold:
        return StockStatus.ALERT
    return StockStatus.OK
