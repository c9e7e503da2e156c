import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from cleanops.auth.dependencies import StaffUserDep
from cleanops.core.errors import validation_detail
from cleanops.core.pagination import PageParamsDep
from cleanops.core.schemas import PaginatedResponse
from cleanops.products.exceptions import ProductNotFoundException
from cleanops.stock_movements.dependencies import StockAdjustmentServiceDep, StockLedgerServiceDep
from cleanops.stock_movements.exceptions import (
    InsufficientStockError,
    StockTransactionError,
    StockValidationError,
)
from cleanops.stock_movements.models import MovementType, StockEntryCreate, StockExitCreate
from cleanops.stock_movements.schemas import StockAdjustmentResult, StockAlerts, StockMovementDetail

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Stock"])

# --- Error Handling Helper ---
def handle_stock_errors(e: Exception):
    if isinstance(e, StockValidationError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=validation_detail(e.field, e.message))
    elif isinstance(e, ProductNotFoundException):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    elif isinstance(e, InsufficientStockError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": e.message, "available": str(e.available), "requested": str(e.requested)},
        )
    elif isinstance(e, StockTransactionError):
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)
    else:
        logger.error(f"[API Stock] Erreur inattendue: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne lors du traitement du mouvement de stock.")


@router.post("/entry", response_model=StockAdjustmentResult, status_code=status.HTTP_201_CREATED)
async def record_stock_entry(payload: StockEntryCreate, service: StockAdjustmentServiceDep, current_user: StaffUserDep):
    """Enregistre une entrée de stock."""
    logger.info(f"[API Stock] Entrée produit {payload.product_id} (+{payload.quantity}) par {current_user.email}")
    try:
        return await service.record_entry(
            product_id=payload.product_id,
            quantity=payload.quantity,
            actor=current_user,
            source=payload.source,
            reference=payload.reference,
            notes=payload.notes,
        )
    except Exception as e:
        handle_stock_errors(e)

@router.post("/exit", response_model=StockAdjustmentResult, status_code=status.HTTP_201_CREATED)
async def record_stock_exit(payload: StockExitCreate, service: StockAdjustmentServiceDep, current_user: StaffUserDep):
    """Enregistre une sortie de stock vers une destination."""
    logger.info(f"[API Stock] Sortie produit {payload.product_id} (-{payload.quantity}) par {current_user.email}")
    try:
        return await service.record_exit(
            product_id=payload.product_id,
            quantity=payload.quantity,
            destination=payload.destination,
            actor=current_user,
            reference=payload.reference,
            notes=payload.notes,
        )
    except Exception as e:
        handle_stock_errors(e)

@router.get("/movements", response_model=PaginatedResponse[StockMovementDetail])
async def list_stock_movements(
    service: StockLedgerServiceDep,
    current_user: StaffUserDep,
    pagination: PageParamsDep,
    product_id: Optional[int] = Query(None, ge=1, description="Filtrer par produit"),
    type: Optional[MovementType] = Query(None, description="ENTRY ou EXIT"),
    start_date: Optional[datetime] = Query(None, description="Date de début (incluse)"),
    end_date: Optional[datetime] = Query(None, description="Date de fin (incluse)"),
):
    """Historique des mouvements, du plus récent au plus ancien."""
    try:
        return await service.list_movements(
            page=pagination.page,
            limit=pagination.limit,
            product_id=product_id,
            movement_type=type,
            start_date=start_date,
            end_date=end_date,
        )
    except Exception as e:
        handle_stock_errors(e)

@router.get("/alerts", response_model=StockAlerts)
async def list_stock_alerts(service: StockLedgerServiceDep, current_user: StaffUserDep):
    """Produits en rupture puis en alerte."""
    try:
        return await service.get_alerts()
    except Exception as e:
        handle_stock_errors(e)
