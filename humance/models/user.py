"""
User Model with role-based access.
Users belong to at most one department; managers lead departments.
"""
from sqlalchemy import Column, Integer, String, Enum, Date, DateTime, Boolean, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from humance.database import Base


class UserRole(str, enum.Enum):
    """
    User roles as shown on screen.

    - ADMIN: HR administration (templates, approvals, KPI apuração, reports)
    - MANAGER: Team leader (reviews and observations for direct reports)
    - COLLABORATOR: Self-service access to own reviews
    """
    ADMIN = "Administrador"
    MANAGER = "Gerente"
    COLLABORATOR = "Colaborador"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)

    role = Column(Enum(UserRole), default=UserRole.COLLABORATOR, nullable=False)
    birth_date = Column(Date, nullable=True)

    department_id = Column(Integer, ForeignKey("departments.id", use_alter=True, name="fk_user_department_id"), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    department = relationship("Department", foreign_keys=[department_id], back_populates="employees")
    led_departments = relationship("Department", foreign_keys="Department.leader_id", back_populates="leader")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")
    trainings = relationship("UserTraining", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.email} ({self.role.value})>"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_manager(self) -> bool:
        return self.role == UserRole.MANAGER

    @property
    def department_name(self):
        return self.department.name if self.department else None
