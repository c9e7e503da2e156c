"""Exceptions personnalisées pour le module categories."""
from typing import Optional

from cleanops.categories.constants import (
    ERROR_CATEGORY_NOT_FOUND,
    ERROR_CATEGORY_NAME_EXISTS,
    ERROR_CATEGORY_IN_USE,
)

class CategoryNotFoundException(Exception):
    """Exception levée lorsqu'une catégorie n'est pas trouvée."""
    def __init__(self, category_id: Optional[int] = None, message: str = ERROR_CATEGORY_NOT_FOUND):
        self.category_id = category_id
        self.message = f"{message}{f' (ID: {category_id})' if category_id else ''}."
        super().__init__(self.message)

class DuplicateCategoryNameException(Exception):
    """Exception levée lorsqu'une catégorie avec le même nom existe déjà."""
    def __init__(self, name: str):
        self.name = name
        self.message = f"{ERROR_CATEGORY_NAME_EXISTS}: '{name}'."
        super().__init__(self.message)

class CategoryInUseException(Exception):
    """Exception levée lors de la suppression d'une catégorie encore référencée."""
    def __init__(self, category_id: int):
        self.category_id = category_id
        self.message = ERROR_CATEGORY_IN_USE
        super().__init__(self.message)
