"""
Constantes pour le module des mouvements de stock.
"""
from decimal import Decimal

ERROR_QUANTITY_POSITIVE = "La quantité doit être supérieure à 0"
ERROR_DESTINATION_REQUIRED = "La destination est obligatoire pour une sortie"
ERROR_INSUFFICIENT_STOCK = "Quantité insuffisante. Stock actuel"
ERROR_STOCK_TRANSACTION = "Le stock est momentanément indisponible, veuillez réessayer."
ERROR_LOCK_TIMEOUT = "Délai d'attente dépassé pour le verrou du produit"
ERROR_QUANTITY_TOO_LARGE = "La quantité en stock dépasserait le maximum autorisé (99999999.99)"

# Plus grande valeur d'une colonne Numeric(10, 2)
MAX_STOCK_QUANTITY = Decimal("99999999.99")
