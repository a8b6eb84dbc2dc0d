import logging
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from humance.core.config import settings
from humance.core.limiter import limiter
from humance.services import auth as auth_service
from humance.database import get_db
from humance.models.user import User
from humance.routers.auth_deps import get_current_user
from humance.schemas.auth import LoginRequest, Token
from humance.schemas.user import UserResponse
from humance.services.audit import AuditService
from humance.services.base import commit_or_fail

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


@router.post("/login", response_model=Token)
@limiter.limit(settings.login_rate_limit)
def login(request: Request, login_data: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == login_data.email.lower()).first()
    valid = user is not None and auth_service.verify_password(login_data.password, user.hashed_password)
    # The login screen lets the user pick a profile; it must match the account
    if valid and login_data.role is not None and user.role != login_data.role:
        valid = False

    if not valid:
        AuditService.log(
            db, None,
            action="failed_login",
            entity_type="user",
            entity_id=user.id if user else None,
            details={"email": login_data.email, "reason": "invalid_credentials"},
        )
        commit_or_fail(db, "Erro ao registrar tentativa de login.")
        logger.warning("Failed login attempt", extra={"email": login_data.email})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="E-mail, senha ou perfil incorretos.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Usuário inativo.")

    access_token = auth_service.create_access_token(data={"sub": str(user.id), "role": user.role.value})

    AuditService.log(
        db, None,
        action="login",
        entity_type="user",
        entity_id=user.id,
        details={"email": user.email},
    )
    commit_or_fail(db, "Erro ao registrar login.")

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": UserResponse.model_validate(user).model_dump(mode="json"),
    }


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user
