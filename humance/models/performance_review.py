from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Float, Text, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from humance.database import Base
import enum


def _utcnow():
    return datetime.now(timezone.utc)


class ReviewStatus(str, enum.Enum):
    PENDING = "Pendente"
    AWAITING_APPROVAL = "Em Aprovação"
    ADJUSTMENT_REQUESTED = "Ajuste Solicitado"
    COMPLETED = "Concluída"


class PerformanceReview(Base):
    __tablename__ = "reviews"
    # One review per employee per period
    __table_args__ = (
        UniqueConstraint("employee_id", "period", name="uq_review_employee_period"),
    )

    id = Column(Integer, primary_key=True, index=True)

    employee_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    manager_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    department_id = Column(Integer, ForeignKey("departments.id", ondelete="SET NULL"), nullable=True, index=True)
    template_id = Column(Integer, ForeignKey("review_templates.id", ondelete="SET NULL"), nullable=True)

    # Snapshots taken when the review is opened
    employee_name = Column(String, nullable=False)
    employee_role = Column(String, nullable=True)
    department_name = Column(String, nullable=True)
    template_name = Column(String, nullable=True)

    period = Column(String(7), nullable=False, index=True)  # YYYY-MM
    status = Column(String, default=ReviewStatus.PENDING.value, nullable=False, index=True)

    scores = Column(JSON, nullable=True)  # {"0": 8, "1": 6}
    average_score = Column(Float, nullable=True)
    kpi_score = Column(Float, nullable=True)

    manager_observations = Column(Text, nullable=True)
    feedback_for_employee = Column(Text, nullable=True)
    admin_feedback_for_manager = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    employee = relationship("User", foreign_keys=[employee_id])
    manager = relationship("User", foreign_keys=[manager_id])
    template = relationship("ReviewTemplate")
    weekly_observations = relationship(
        "WeeklyObservation",
        back_populates="review",
        cascade="all, delete-orphan",
        order_by="[desc(WeeklyObservation.created_at), desc(WeeklyObservation.id)]",
    )
    # Deleting a review nulls review_id on its notifications
    notifications = relationship("Notification", back_populates="review")

    def __repr__(self):
        return f"<PerformanceReview {self.id} {self.employee_name} {self.period} [{self.status}]>"


class WeeklyObservation(Base):
    __tablename__ = "weekly_observations"

    id = Column(Integer, primary_key=True, index=True)
    review_id = Column(Integer, ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    review = relationship("PerformanceReview", back_populates="weekly_observations")
