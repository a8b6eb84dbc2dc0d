from typing import Optional
from sqlalchemy.orm import Session
from humance.models.notification import Notification, NotificationType

class NotificationService:
    @staticmethod
    def create_notification(
        db: Session,
        user_id: int,
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
        review_id: Optional[int] = None
    ) -> Notification:
        """
        Internal utility for creating notifications.
        Added to the caller's unit of work; the caller commits.
        """
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=NotificationType(type).value,
            review_id=review_id
        )
        db.add(notification)
        return notification

    @staticmethod
    def notify_user(
        db: Session,
        user_id: Optional[int],
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
        review_id: Optional[int] = None
    ):
        """
        Standardized notification trigger. Silently skips reviews whose
        manager or employee no longer exists.
        """
        if user_id is None:
            return None
        return NotificationService.create_notification(db, user_id, title, message, type, review_id)
