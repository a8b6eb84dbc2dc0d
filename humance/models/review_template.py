from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from humance.database import Base


class ReviewTemplate(Base):
    __tablename__ = "review_templates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    # [{"text": ..., "description": ...}]; scores are keyed by item position
    items = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    assignments = relationship("TemplateAssignment", back_populates="template", cascade="all, delete-orphan")


class TemplateAssignment(Base):
    __tablename__ = "review_assignments"

    id = Column(Integer, primary_key=True, index=True)
    template_id = Column(Integer, ForeignKey("review_templates.id", ondelete="CASCADE"), nullable=False, index=True)
    manager_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String, default="Pendente")
    assigned_at = Column(DateTime(timezone=True), server_default=func.now())

    template = relationship("ReviewTemplate", back_populates="assignments")
    manager = relationship("User")
