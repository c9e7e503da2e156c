import logging

from fastapi import APIRouter, HTTPException, Path, Response, status

from cleanops.auth.dependencies import AdminUserDep, StaffUserDep
from cleanops.categories.dependencies import CategoryServiceDep
from cleanops.categories.exceptions import (
    CategoryInUseException,
    CategoryNotFoundException,
    DuplicateCategoryNameException,
)
from cleanops.categories.models import CategoryCreate, CategoryRead, CategoryReadWithCount, CategoryUpdate
from cleanops.core.pagination import PageParamsDep
from cleanops.core.schemas import PaginatedResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Categories"])

# --- Error Handling Helper ---
def handle_category_service_errors(e: Exception):
    if isinstance(e, CategoryNotFoundException):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    elif isinstance(e, DuplicateCategoryNameException):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    elif isinstance(e, CategoryInUseException):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    else:
        logger.error(f"[API Categories] Erreur inattendue: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne lors du traitement de la catégorie.")


@router.get("/", response_model=PaginatedResponse[CategoryReadWithCount])
async def read_categories(service: CategoryServiceDep, current_user: StaffUserDep, pagination: PageParamsDep):
    """Récupère une liste paginée de catégories avec leur nombre de produits."""
    try:
        return await service.list_categories(page=pagination.page, limit=pagination.limit)
    except Exception as e:
        handle_category_service_errors(e)

@router.post("/", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
async def create_category(category: CategoryCreate, service: CategoryServiceDep, current_user: StaffUserDep):
    logger.info(f"[API Categories] Création par {current_user.email}: name={category.name}")
    try:
        return await service.create_category(category_data=category)
    except Exception as e:
        handle_category_service_errors(e)

@router.get("/{category_id}", response_model=CategoryRead)
async def read_category(service: CategoryServiceDep, current_user: StaffUserDep, category_id: int = Path(..., ge=1)):
    try:
        return await service.get_category(category_id=category_id)
    except Exception as e:
        handle_category_service_errors(e)

@router.put("/{category_id}", response_model=CategoryRead)
async def update_category(
    category: CategoryUpdate,
    service: CategoryServiceDep,
    current_user: StaffUserDep,
    category_id: int = Path(..., ge=1),
):
    logger.info(f"[API Categories] Mise à jour {category_id} par {current_user.email}")
    try:
        return await service.update_category(category_id=category_id, category_data=category)
    except Exception as e:
        handle_category_service_errors(e)

@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(service: CategoryServiceDep, current_user: AdminUserDep, category_id: int = Path(..., ge=1)):
    """Supprime une catégorie (Admin requis)."""
    logger.info(f"[API Categories] Suppression {category_id} par l'admin {current_user.email}")
    try:
        await service.delete_category(category_id=category_id)
    except Exception as e:
        handle_category_service_errors(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
