"""
Notification Model.
In-app messages raised by the review lifecycle: the manager hears about an
adjustment request, the employee about a completed review. A notification
about a review points at it; deleting the review keeps the message but drops
the link.
"""
import enum
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from humance.database import Base


class NotificationType(str, enum.Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    review_id = Column(Integer, ForeignKey("reviews.id", ondelete="SET NULL"), nullable=True, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(20), default=NotificationType.INFO.value, nullable=False)
    is_read = Column(Boolean, default=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="notifications")
    review = relationship("PerformanceReview", back_populates="notifications")

    @property
    def link(self):
        """Front-end route of the review this notification is about."""
        return f"/avaliacoes/{self.review_id}" if self.review_id else None
