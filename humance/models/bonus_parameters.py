from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.sql import func
from humance.database import Base

PERFORMANCE_BONUS_KEY = "bonusParameters"
KPI_BONUS_KEY = "kpiBonusParameters"
EMPLOYEE_OF_THE_MONTH_KEY = "employeeOfTheMonth"


class ConfigDocument(Base):
    """Admin-editable configuration stored as a single JSON document per key."""
    __tablename__ = "config_documents"

    key = Column(String, primary_key=True)
    data = Column(JSON, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
