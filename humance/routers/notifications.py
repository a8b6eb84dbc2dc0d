from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from humance.core.exceptions import NotFoundError
from humance.database import get_db
from humance.models.notification import Notification
from humance.routers.auth_deps import get_auth_context
from humance.schemas.auth import AuthContext
from humance.schemas.notification import NotificationResponse
from humance.services.base import commit_or_fail

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("/", response_model=List[NotificationResponse])
def get_notifications(
    unread_only: bool = False,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(get_auth_context)
):
    query = db.query(Notification).filter(Notification.user_id == actor.user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(50).all()


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
def mark_notification_as_read(
    notification_id: int,
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(get_auth_context)
):
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == actor.user_id
    ).first()
    if not notification:
        raise NotFoundError("Notificação não encontrada.")

    notification.is_read = True
    commit_or_fail(db, "Erro ao atualizar notificação.")
    db.refresh(notification)
    return notification


@router.post("/mark-all-read")
def mark_all_notifications_as_read(
    db: Session = Depends(get_db),
    actor: AuthContext = Depends(get_auth_context)
):
    db.query(Notification).filter(
        Notification.user_id == actor.user_id,
        Notification.is_read.is_(False)
    ).update({Notification.is_read: True}, synchronize_session=False)
    commit_or_fail(db, "Erro ao atualizar notificações.")
    return {"success": True, "message": "Todas as notificações foram marcadas como lidas."}
