"""
Org chart: departments, their leaders, and users.
"""
import logging
from typing import List

from sqlalchemy.orm import Session

from humance.core.exceptions import ConflictError, NotFoundError, ValidationFailedError
from humance.services import auth as auth_service
from humance.models.department import Department
from humance.models.user import User, UserRole
from humance.schemas.auth import AuthContext
from humance.schemas.department import DepartmentCreate, DepartmentUpdate
from humance.schemas.user import UserCreate, UserUpdate
from humance.services.base import commit_or_fail

logger = logging.getLogger(__name__)


# --- Lookups ---

def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("Usuário não encontrado.")
    return user


def get_department(db: Session, department_id: int) -> Department:
    department = db.get(Department, department_id)
    if not department:
        raise NotFoundError("Setor não encontrado.")
    return department


def led_department_ids(db: Session, user_id: int) -> List[int]:
    rows = db.query(Department.id).filter(Department.leader_id == user_id).all()
    return [row[0] for row in rows]


def team_for_manager(db: Session, manager_id: int) -> List[User]:
    """Users assigned to any department the manager leads."""
    department_ids = led_department_ids(db, manager_id)
    if not department_ids:
        return []
    return (
        db.query(User)
        .filter(User.department_id.in_(department_ids))
        .order_by(User.name)
        .all()
    )


def build_auth_context(user: User, db: Session) -> AuthContext:
    return AuthContext(
        user_id=user.id,
        name=user.name,
        role=user.role,
        department_id=user.department_id,
        led_department_ids=led_department_ids(db, user.id) if user.role == UserRole.MANAGER else [],
    )


# --- Departments ---

def list_managers(db: Session) -> List[User]:
    return db.query(User).filter(User.role == UserRole.MANAGER).order_by(User.name).all()


def list_departments(db: Session) -> List[Department]:
    return db.query(Department).order_by(Department.name).all()


def _check_leader(db: Session, leader_id: int):
    if not db.get(User, leader_id):
        raise NotFoundError("Líder não encontrado.")


def create_department(db: Session, data: DepartmentCreate) -> Department:
    _check_leader(db, data.leader_id)
    department = Department(name=data.name.strip(), leader_id=data.leader_id)
    db.add(department)
    commit_or_fail(db, "Erro ao criar setor.")
    db.refresh(department)
    logger.info(f"Department {department.id} created", extra={"department_id": department.id})
    return department


def update_department(db: Session, department_id: int, data: DepartmentUpdate) -> Department:
    department = get_department(db, department_id)
    _check_leader(db, data.leader_id)
    department.name = data.name.strip()
    department.leader_id = data.leader_id
    commit_or_fail(db, "Erro ao atualizar setor.")
    db.refresh(department)
    return department


def delete_department(db: Session, department_id: int):
    department = get_department(db, department_id)
    # Members become unassigned; reviews keep their department snapshot
    db.query(User).filter(User.department_id == department_id).update(
        {User.department_id: None}, synchronize_session=False
    )
    db.delete(department)
    commit_or_fail(db, "Erro ao excluir setor.")


# --- Users ---

def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.name).all()


def _check_department(db: Session, department_id):
    if department_id is not None and not db.get(Department, department_id):
        raise NotFoundError("Setor não encontrado.")


def _check_email_free(db: Session, email: str, user_id=None):
    query = db.query(User).filter(User.email == email)
    if user_id is not None:
        query = query.filter(User.id != user_id)
    if query.first():
        raise ConflictError("Já existe um usuário com este e-mail.")


def create_user(db: Session, data: UserCreate) -> User:
    if not data.password or len(data.password) < 6:
        raise ValidationFailedError("A senha é obrigatória e deve ter pelo menos 6 caracteres.")
    email = data.email.lower()
    _check_email_free(db, email)
    _check_department(db, data.department_id)

    user = User(
        name=data.name.strip(),
        email=email,
        hashed_password=auth_service.get_password_hash(data.password),
        role=data.role,
        birth_date=data.birth_date,
        department_id=data.department_id,
    )
    db.add(user)
    commit_or_fail(db, "Ocorreu um erro ao criar o usuário. Tente novamente.")
    db.refresh(user)
    logger.info(f"User {user.id} created", extra={"user_id": user.id, "role": user.role.value})
    return user


def update_user(db: Session, user_id: int, data: UserUpdate) -> User:
    user = get_user(db, user_id)
    email = data.email.lower()
    _check_email_free(db, email, user_id=user.id)
    _check_department(db, data.department_id)

    user.name = data.name.strip()
    user.email = email
    user.role = data.role
    user.birth_date = data.birth_date
    user.department_id = data.department_id
    if data.password:
        user.hashed_password = auth_service.get_password_hash(data.password)

    commit_or_fail(db, "Erro ao atualizar usuário.")
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: int):
    user = get_user(db, user_id)
    db.query(Department).filter(Department.leader_id == user_id).update(
        {Department.leader_id: None}, synchronize_session=False
    )
    db.delete(user)
    commit_or_fail(db, "Erro ao excluir usuário.")
