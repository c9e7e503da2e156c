"""Constantes du module categories."""

# Messages d'erreur
ERROR_CATEGORY_NOT_FOUND = "Catégorie non trouvée"
ERROR_CATEGORY_NAME_EXISTS = "Cette catégorie existe déjà"
ERROR_CATEGORY_IN_USE = "Impossible de supprimer une catégorie contenant des produits"
