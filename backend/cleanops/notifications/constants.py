"""
Constantes du module notifications.
"""

# Nombre de notifications non lues renvoyées avec le compteur
UNREAD_PREVIEW_LIMIT = 20

DEFAULT_UNIT_LABEL = "unités"

ERROR_NOTIFICATION_NOT_FOUND = "Notification non trouvée"
