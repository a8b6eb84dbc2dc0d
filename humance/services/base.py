import logging
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from humance.core.exceptions import StoreError
from humance.schemas.auth import AuthContext


class BaseService:
    """
    Common plumbing for class-based services: the request session, the
    acting user (if any) and a logger named after the concrete service.
    """

    def __init__(self, db: Session, actor: Optional[AuthContext] = None):
        self.db = db
        self.actor = actor
        self._logger = logging.getLogger(self.__class__.__module__)

    def log_warning(self, message: str):
        self._logger.warning(message)


def commit_or_fail(db: Session, failure_message: str):
    """
    Commit the action's unit of work. Store failures are rolled back, logged
    and surfaced as a generic StoreError carrying `failure_message`.
    """
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logging.getLogger(__name__).exception(failure_message)
        raise StoreError(failure_message)
