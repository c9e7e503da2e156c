"""
Constantes pour le module produits.
"""
from decimal import Decimal

DEFAULT_UNIT = "pièce"
DEFAULT_ALERT_THRESHOLD = Decimal("10")

# Messages d'erreur
ERROR_PRODUCT_NOT_FOUND = "Produit non trouvé"
ERROR_PRODUCT_CODE_EXISTS = "Un produit avec ce code existe déjà"
