from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from humance.database import Base
import enum


class IndicatorType(str, enum.Enum):
    ACCELERATOR = "accelerator"
    DETRACTOR = "detractor"
    NEUTRAL = "neutral"


class IndicatorCondition(str, enum.Enum):
    ABOVE = "above"
    BELOW = "below"


class KpiModel(Base):
    __tablename__ = "kpi_models"

    id = Column(Integer, primary_key=True, index=True)
    department_id = Column(Integer, ForeignKey("departments.id", ondelete="CASCADE"), nullable=False, unique=True)
    # Ordered list of {"indicator", "weight", "goal", "type", "condition"}
    indicators = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    department = relationship("Department", back_populates="kpi_model")


class KpiAssessment(Base):
    """Snapshot of one apuração; one per department per period."""
    __tablename__ = "kpi_assessments"
    __table_args__ = (
        UniqueConstraint("department_id", "period", name="uq_kpi_assessment_department_period"),
    )

    id = Column(Integer, primary_key=True, index=True)
    department_id = Column(Integer, ForeignKey("departments.id", ondelete="CASCADE"), nullable=False, index=True)
    department_name = Column(String, nullable=False)
    period = Column(String(7), nullable=False, index=True)
    kpi_score = Column(Float, nullable=False)
    results = Column(JSON, nullable=False, default=dict)
    indicators = Column(JSON, nullable=False, default=list)
    assessed_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
