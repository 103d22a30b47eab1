from src.notifications.domain.notification import Notification, NotificationType

__all__ = ["Notification", "NotificationType"]
