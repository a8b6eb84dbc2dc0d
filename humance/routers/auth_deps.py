"""
Authentication dependencies.

`get_auth_context` turns the bearer token into an explicit AuthContext that
endpoints hand to the service layer. `require_role` narrows an endpoint to
a set of roles.
"""
import logging
from typing import Callable, List

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from humance.services import auth as auth_service
from humance.database import get_db
from humance.models.user import User, UserRole
from humance.schemas.auth import AuthContext
from humance.services.org_service import build_auth_context

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    payload = auth_service.decode_access_token(token)

    if payload is None:
        logger.warning("Authentication failed: Invalid token")
        raise _unauthorized("Could not validate credentials")

    if payload.get("error") == "TOKEN_EXPIRED":
        logger.info("Authentication failed: Token expired")
        raise _unauthorized("TOKEN_EXPIRED")

    if payload.get("type") != "access":
        logger.warning("Authentication failed: Invalid token type")
        raise _unauthorized("Invalid token type")

    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        logger.warning("Authentication failed: Missing subject in token")
        raise _unauthorized("Missing subject in token")

    user = db.get(User, int(subject))
    if user is None:
        logger.warning(f"Authentication failed: User {subject} not found in database")
        raise _unauthorized("User not found")
    if not user.is_active:
        logger.warning(f"Authentication failed: User {subject} is inactive")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User is inactive")
    return user


def get_auth_context(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AuthContext:
    return build_auth_context(current_user, db)


def require_role(allowed_roles: List[UserRole]) -> Callable:
    """
    Dependency factory resolving the AuthContext and checking its role.

    Usage:
        @router.post("/kpi/process")
        def process(actor: AuthContext = Depends(require_role([UserRole.ADMIN]))):
            ...
    """
    def role_checker(actor: AuthContext = Depends(get_auth_context)) -> AuthContext:
        if actor.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Acesso negado. Perfis permitidos: {[r.value for r in allowed_roles]}",
            )
        return actor
    return role_checker


def require_admin():
    return require_role([UserRole.ADMIN])


def require_manager():
    """Managers and administrators."""
    return require_role([UserRole.ADMIN, UserRole.MANAGER])
