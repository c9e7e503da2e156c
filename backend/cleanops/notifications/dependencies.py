from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cleanops.database import get_db_session
from cleanops.notifications.service import NotificationService


def get_notification_service(db: Annotated[AsyncSession, Depends(get_db_session)]) -> NotificationService:
    return NotificationService(db=db)

NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service)]
