import pytest
import os
from datetime import date
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["AI_KILL_SWITCH"] = "false"

from humance.database import Base, get_db
from humance.main import app
from humance.core.limiter import limiter
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Get a clean database session for each test function with rollback safety."""
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    if transaction.is_active:
        transaction.rollback()
    connection.close()


def _make_user(db_session, name, email, role, department_id=None):
    from humance.models.user import User
    from humance.services import auth as auth_service

    user = User(
        name=name,
        email=email,
        hashed_password=auth_service.get_password_hash("Senha123!"),
        role=role,
        birth_date=date(1990, 5, 17),
        department_id=department_id,
        is_active=True,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope="function")
def admin_user(db_session):
    """HR administrator."""
    from humance.models.user import UserRole
    return _make_user(db_session, "Ana Administradora", "admin@humance.com.br", UserRole.ADMIN)


@pytest.fixture(scope="function")
def manager_user(db_session):
    from humance.models.user import UserRole
    return _make_user(db_session, "Marcos Gerente", "gerente@humance.com.br", UserRole.MANAGER)


@pytest.fixture(scope="function")
def department(db_session, manager_user):
    """Department led by manager_user; the manager sits in it too."""
    from humance.models.department import Department
    dept = Department(name="Comercial", leader_id=manager_user.id)
    db_session.add(dept)
    db_session.commit()
    manager_user.department_id = dept.id
    db_session.commit()
    return dept


@pytest.fixture(scope="function")
def collaborator_user(db_session, department):
    from humance.models.user import UserRole
    return _make_user(
        db_session, "Carla Colaboradora", "colaboradora@humance.com.br", UserRole.COLLABORATOR,
        department_id=department.id,
    )


@pytest.fixture(scope="function")
def template(db_session, manager_user):
    """Three-item template assigned to manager_user."""
    from humance.models.review_template import ReviewTemplate, TemplateAssignment
    tpl = ReviewTemplate(
        name="Avaliação Mensal",
        items=[
            {"text": "Comunicação", "description": "Clareza com a equipe"},
            {"text": "Entrega", "description": None},
            {"text": "Trabalho em equipe", "description": None},
        ],
    )
    db_session.add(tpl)
    db_session.commit()
    db_session.add(TemplateAssignment(template_id=tpl.id, manager_id=manager_user.id, status="Pendente"))
    db_session.commit()
    return tpl


@pytest.fixture(scope="function")
def get_token():
    """Helper fixture to create access tokens."""
    from humance.services import auth as auth_service

    def _get_token(user):
        return auth_service.create_access_token(data={"sub": str(user.id), "role": user.role.value})
    return _get_token


@pytest.fixture(scope="function")
def auth_headers(get_token):
    def _headers(user):
        return {"Authorization": f"Bearer {get_token(user)}"}
    return _headers


@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    limiter.reset()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
