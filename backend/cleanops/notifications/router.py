import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Path, Query, Response, status

from cleanops.auth.dependencies import CurrentUserDep
from cleanops.core.pagination import PageParamsDep
from cleanops.core.schemas import PaginatedResponse
from cleanops.notifications.dependencies import NotificationServiceDep
from cleanops.notifications.exceptions import NotificationNotFoundException
from cleanops.notifications.models import NotificationRead, NotificationType, UnreadNotifications

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Notifications"])

def handle_notification_errors(e: Exception):
    if isinstance(e, NotificationNotFoundException):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    logger.error(f"[API Notifications] Erreur inattendue: {e}", exc_info=True)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne lors du traitement des notifications.")


@router.get("/", response_model=PaginatedResponse[NotificationRead])
async def list_notifications(
    service: NotificationServiceDep,
    current_user: CurrentUserDep,
    pagination: PageParamsDep,
    type: Optional[NotificationType] = Query(None, description="Filtrer par type"),
    is_read: Optional[bool] = Query(None, description="Filtrer par état de lecture"),
):
    """Notifications de l'utilisateur courant (personnelles et diffusées), les plus récentes d'abord."""
    try:
        return await service.list_notifications(
            user_id=current_user.id, page=pagination.page, limit=pagination.limit, type=type, is_read=is_read
        )
    except Exception as e:
        handle_notification_errors(e)

@router.get("/unread", response_model=UnreadNotifications)
async def unread_notifications(service: NotificationServiceDep, current_user: CurrentUserDep):
    try:
        return await service.get_unread(user_id=current_user.id)
    except Exception as e:
        handle_notification_errors(e)

@router.put("/read-all", status_code=status.HTTP_204_NO_CONTENT)
async def mark_all_notifications_read(service: NotificationServiceDep, current_user: CurrentUserDep):
    try:
        await service.mark_all_as_read(user_id=current_user.id)
    except Exception as e:
        handle_notification_errors(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.put("/{notification_id}/read", response_model=NotificationRead)
async def mark_notification_read(
    service: NotificationServiceDep,
    current_user: CurrentUserDep,
    notification_id: int = Path(..., ge=1),
):
    try:
        return await service.mark_as_read(notification_id=notification_id, user_id=current_user.id)
    except Exception as e:
        handle_notification_errors(e)

@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    service: NotificationServiceDep,
    current_user: CurrentUserDep,
    notification_id: int = Path(..., ge=1),
):
    try:
        await service.delete_notification(notification_id=notification_id, user_id=current_user.id)
    except Exception as e:
        handle_notification_errors(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
