"""
Service des notifications.

Les notifications de stock sont émises après validation de la transaction de
stock, dans leur propre transaction. Un échec est journalisé puis ignoré: il
ne remet jamais en cause le mouvement enregistré.
"""
import logging
from typing import Any, Dict, Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from cleanops.core.schemas import PaginatedResponse, utcnow
from cleanops.notifications.constants import DEFAULT_UNIT_LABEL, UNREAD_PREVIEW_LIMIT
from cleanops.notifications.exceptions import NotificationNotFoundException
from cleanops.notifications.models import (
    Notification,
    NotificationPriority,
    NotificationRead,
    NotificationType,
    UnreadNotifications,
)
from cleanops.products.models import ProductRead
from cleanops.products.status import StockStatus
from cleanops.stock_movements.models import MovementType, StockMovementRead
from cleanops.users.models import UserRead

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, db: AsyncSession):
        self.db = db

    # --- Émission ---

    async def _create(
        self,
        type: NotificationType,
        title: str,
        message: str,
        data: Dict[str, Any],
        priority: NotificationPriority,
        user_id: Optional[int] = None,
    ) -> Optional[Notification]:
        notification = Notification(
            user_id=user_id, type=type, title=title, message=message, data=data, priority=priority
        )
        try:
            self.db.add(notification)
            await self.db.commit()
        except Exception as e:
            logger.error(f"[NotificationService] Échec de création de la notification '{title}': {e}", exc_info=True)
            await self.db.rollback()
            return None
        logger.debug(f"[NotificationService] Notification {notification.id} créée ({type.value}).")
        return notification

    async def emit_movement(self, movement: StockMovementRead, product: ProductRead, actor: UserRead) -> Optional[Notification]:
        """Notifie le personnel d'une entrée ou d'une sortie de stock."""
        label = "Entrée" if movement.type == MovementType.ENTRY else "Sortie"
        destination = f" vers {movement.destination}" if movement.destination else ""
        return await self._create(
            type=NotificationType.STOCK_MOVEMENT,
            title=f"{label} de stock",
            message=f'{label} de {movement.quantity} {product.unit or DEFAULT_UNIT_LABEL} de "{product.name}"{destination}',
            data={
                "product_id": product.id,
                "movement_id": movement.id,
                "type": movement.type.value,
                "quantity": str(movement.quantity),
                "user_id": actor.id,
            },
            priority=NotificationPriority.LOW,
        )

    async def emit_stock_alert(self, product: ProductRead) -> Optional[Notification]:
        """Notifie une rupture (priorité haute) ou un passage sous le seuil d'alerte."""
        out_of_stock = product.status == StockStatus.OUT_OF_STOCK
        if out_of_stock:
            message = f'Le produit "{product.name}" est en rupture de stock!'
        else:
            message = (
                f'Le produit "{product.name}" a atteint le seuil d\'alerte '
                f"({product.quantity}/{product.alert_threshold})"
            )
        return await self._create(
            type=NotificationType.STOCK_OUT if out_of_stock else NotificationType.STOCK_ALERT,
            title="Rupture de stock" if out_of_stock else "Alerte de stock",
            message=message,
            data={
                "product_id": product.id,
                "quantity": str(product.quantity),
                "alert_threshold": str(product.alert_threshold),
            },
            priority=NotificationPriority.HIGH if out_of_stock else NotificationPriority.MEDIUM,
        )

    # --- Consultation ---

    @staticmethod
    def _visible_to(user_id: int):
        # Notifications personnelles et diffusées
        return or_(Notification.user_id == user_id, Notification.user_id.is_(None))

    async def list_notifications(
        self,
        user_id: int,
        page: int,
        limit: int,
        type: Optional[NotificationType] = None,
        is_read: Optional[bool] = None,
    ) -> PaginatedResponse[NotificationRead]:
        conditions = [self._visible_to(user_id)]
        if type is not None:
            conditions.append(Notification.type == type)
        if is_read is not None:
            conditions.append(Notification.is_read == is_read)

        total = await self.db.scalar(select(func.count(Notification.id)).where(*conditions))
        result = await self.db.execute(
            select(Notification)
            .where(*conditions)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        items = [NotificationRead.model_validate(n) for n in result.scalars().all()]
        return PaginatedResponse[NotificationRead].build(items=items, total=total or 0, page=page, limit=limit)

    async def get_unread(self, user_id: int) -> UnreadNotifications:
        conditions = [self._visible_to(user_id), Notification.is_read == False]  # noqa: E712
        count = await self.db.scalar(select(func.count(Notification.id)).where(*conditions))
        result = await self.db.execute(
            select(Notification)
            .where(*conditions)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(UNREAD_PREVIEW_LIMIT)
        )
        return UnreadNotifications(
            count=count or 0,
            notifications=[NotificationRead.model_validate(n) for n in result.scalars().all()],
        )

    async def _get_visible(self, notification_id: int, user_id: int) -> Notification:
        result = await self.db.execute(
            select(Notification).where(Notification.id == notification_id, self._visible_to(user_id))
        )
        notification = result.scalars().first()
        if notification is None:
            raise NotificationNotFoundException(notification_id)
        return notification

    async def mark_as_read(self, notification_id: int, user_id: int) -> NotificationRead:
        notification = await self._get_visible(notification_id, user_id)
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = utcnow()
            await self.db.commit()
        return NotificationRead.model_validate(notification)

    async def mark_all_as_read(self, user_id: int) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(self._visible_to(user_id), Notification.is_read == False)  # noqa: E712
            .values(is_read=True, read_at=utcnow())
        )
        await self.db.commit()
        logger.info(f"[NotificationService] {result.rowcount} notification(s) marquée(s) comme lue(s) pour l'utilisateur {user_id}.")
        return result.rowcount

    async def delete_notification(self, notification_id: int, user_id: int) -> None:
        notification = await self._get_visible(notification_id, user_id)
        await self.db.delete(notification)
        await self.db.commit()
