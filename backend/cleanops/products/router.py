import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Path, Query, Response, status

from cleanops.auth.dependencies import AdminUserDep, StaffUserDep
from cleanops.core.errors import validation_detail
from cleanops.core.pagination import PageParamsDep
from cleanops.core.schemas import PaginatedResponse
from cleanops.products.dependencies import ProductServiceDep
from cleanops.products.exceptions import (
    DuplicateProductCodeException,
    InvalidProductOperationException,
    ProductNotFoundException,
)
from cleanops.products.models import ProductCreate, ProductRead, ProductReadWithHistory, ProductStats, ProductUpdate
from cleanops.products.status import StockStatus
from cleanops.stock_movements.exceptions import StockTransactionError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Products"])

# --- Error Handling Helper ---
def handle_product_errors(e: Exception):
    if isinstance(e, ProductNotFoundException):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    elif isinstance(e, DuplicateProductCodeException):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    elif isinstance(e, InvalidProductOperationException):
        detail = validation_detail(e.field, e.message) if e.field else e.message
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
    elif isinstance(e, StockTransactionError):
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)
    else:
        logger.error(f"[API Products] Erreur inattendue: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne lors du traitement du produit.")


@router.post("/", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
async def create_product(product: ProductCreate, service: ProductServiceDep, current_user: StaffUserDep):
    logger.info(f"[API Products] Création par {current_user.email}: {product.name}")
    try:
        return await service.create_product(product_data=product)
    except Exception as e:
        handle_product_errors(e)

@router.get("/", response_model=PaginatedResponse[ProductRead])
async def list_products(
    service: ProductServiceDep,
    current_user: StaffUserDep,
    pagination: PageParamsDep,
    category_id: Optional[int] = Query(None, ge=1),
    status: Optional[StockStatus] = Query(None, description="OK, ALERT ou OUT_OF_STOCK"),
    search: Optional[str] = Query(None, description="Recherche sur le nom, le code ou la description"),
):
    """Liste paginée des produits actifs, triés par nom."""
    try:
        return await service.list_products(
            page=pagination.page, limit=pagination.limit, category_id=category_id, status=status, search=search
        )
    except Exception as e:
        handle_product_errors(e)

@router.get("/stats", response_model=ProductStats)
async def product_stats(service: ProductServiceDep, current_user: StaffUserDep):
    try:
        return await service.get_product_stats()
    except Exception as e:
        handle_product_errors(e)

@router.get("/{product_id}", response_model=ProductReadWithHistory)
async def read_product(service: ProductServiceDep, current_user: StaffUserDep, product_id: int = Path(..., ge=1)):
    """Détail d'un produit avec ses derniers mouvements de stock."""
    try:
        return await service.get_product(product_id=product_id)
    except Exception as e:
        handle_product_errors(e)

@router.put("/{product_id}", response_model=ProductRead)
async def update_product(
    product: ProductUpdate,
    service: ProductServiceDep,
    current_user: StaffUserDep,
    product_id: int = Path(..., ge=1),
):
    logger.info(f"[API Products] Mise à jour {product_id} par {current_user.email}")
    try:
        return await service.update_product(product_id=product_id, product_data=product)
    except Exception as e:
        handle_product_errors(e)

@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(service: ProductServiceDep, current_user: AdminUserDep, product_id: int = Path(..., ge=1)):
    """Suppression logique d'un produit (Admin requis)."""
    logger.info(f"[API Products] Suppression {product_id} par l'admin {current_user.email}")
    try:
        await service.delete_product(product_id=product_id)
    except Exception as e:
        handle_product_errors(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
