# services/ui_service/app/notifications.py
from typing import List
from core.models import Notification


class NotificationCenter:
    """Collects the toasts produced by a controller until the UI drains them."""

    def __init__(self):
        self.notifications: List[Notification] = []

    def notify(self, title: str, description: str = "", variant: str = "default") -> Notification:
        notification = Notification(title=title, description=description, variant=variant)
        self.notifications.append(notification)
        return notification

    def notify_error(self, title: str, description: str = "") -> Notification:
        return self.notify(title, description, variant="destructive")

    def drain_notifications(self) -> List[Notification]:
        drained, self.notifications = self.notifications, []
        return drained
