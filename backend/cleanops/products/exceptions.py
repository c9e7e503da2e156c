"""
Exceptions personnalisées pour le module produits.
"""
from typing import Optional

from cleanops.products.constants import ERROR_PRODUCT_NOT_FOUND, ERROR_PRODUCT_CODE_EXISTS


class ProductError(Exception):
    """Classe de base pour les exceptions liées aux produits."""
    pass

class ProductNotFoundException(ProductError):
    """Levée lorsque le produit n'existe pas ou a été supprimé."""
    def __init__(self, product_id: Optional[int] = None, message: str = ERROR_PRODUCT_NOT_FOUND):
        self.product_id = product_id
        self.message = f"{message}{f' (ID: {product_id})' if product_id else ''}."
        super().__init__(self.message)

class DuplicateProductCodeException(ProductError):
    """Levée lorsqu'un autre produit utilise déjà ce code."""
    def __init__(self, code: str):
        self.code = code
        self.message = f"{ERROR_PRODUCT_CODE_EXISTS}: '{code}'."
        super().__init__(self.message)

class InvalidProductOperationException(ProductError):
    """Opération invalide sur un produit (catégorie inconnue, etc.)."""
    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(self.message)
