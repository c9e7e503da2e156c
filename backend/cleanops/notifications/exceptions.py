from typing import Optional

from cleanops.notifications.constants import ERROR_NOTIFICATION_NOT_FOUND


class NotificationNotFoundException(Exception):
    """Notification inexistante ou non visible par l'utilisateur."""
    def __init__(self, notification_id: Optional[int] = None):
        self.notification_id = notification_id
        self.message = f"{ERROR_NOTIFICATION_NOT_FOUND}{f' (ID: {notification_id})' if notification_id else ''}."
        super().__init__(self.message)
