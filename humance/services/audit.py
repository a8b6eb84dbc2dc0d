from typing import Any, Optional
from humance.services.base import BaseService
from humance.models.audit_log import AuditLog


def _sanitize(obj: Any):
    # Ensure serialization of nested Pydantic models and enums in details/states
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    if isinstance(obj, dict):
        return {str(k): _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitize(i) for i in obj]
    if hasattr(obj, "value"):
        return obj.value
    if hasattr(obj, "isoformat"):
        return obj.isoformat()
    return obj


class AuditService(BaseService):
    def log_action(
        self,
        action: str,
        entity_type: str,
        entity_id: Optional[int],
        details: dict,
        before_state: Optional[dict] = None,
        after_state: Optional[dict] = None
    ):
        """
        Append an audit log entry to the current unit of work.
        Not committed here: the entry lands together with the action it records.
        """
        db_log = AuditLog(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=self.actor.user_id if self.actor else None,
            user_role=self.actor.role.value if self.actor else "system",
            details=_sanitize(details),
            before_state=_sanitize(before_state),
            after_state=_sanitize(after_state)
        )
        self.db.add(db_log)
        return db_log

    # Static wrapper for call sites that do not hold a service instance
    @staticmethod
    def log(db, actor, *args, **kwargs):
        service = AuditService(db, actor)
        return service.log_action(*args, **kwargs)
