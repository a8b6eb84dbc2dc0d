"""
Department Model.
Each department has one leader (a manager); its members form the leader's team.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from humance.database import Base


class Department(Base):
    __tablename__ = "departments"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)

    leader_id = Column(Integer, ForeignKey("users.id", use_alter=True, name="fk_department_leader_id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    leader = relationship("User", foreign_keys=[leader_id], back_populates="led_departments")
    employees = relationship("User", foreign_keys="User.department_id", back_populates="department")
    kpi_model = relationship("KpiModel", back_populates="department", uselist=False, cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Department {self.id}: {self.name}>"

    @property
    def leader_name(self) -> str:
        return self.leader.name if self.leader else "Líder não encontrado"
