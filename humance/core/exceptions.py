from typing import Any, Dict, Optional

class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

class ValidationFailedError(AppException):
    """Input passed schema validation but breaks a business rule."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=422,
            error_code="VALIDATION_FAILED",
            details=details
        )

class NotFoundError(AppException):
    def __init__(self, message: str = "Registro não encontrado."):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND"
        )

class InvalidTransitionError(AppException):
    def __init__(self, action: str, current_status: str):
        super().__init__(
            message=f"Ação '{action}' não permitida para avaliação com status '{current_status}'.",
            status_code=409,
            error_code="INVALID_TRANSITION",
            details={"action": action, "status": current_status}
        )

class ConflictError(AppException):
    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=409,
            error_code="CONFLICT"
        )

class StoreError(AppException):
    """Raised after a failed write has been rolled back and logged."""
    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=500,
            error_code="STORE_ERROR"
        )

class AIError(AppException):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=503,
            error_code="AI_SERVICE_UNAVAILABLE",
            details=details
        )

class AIKillSwitchError(AppException):
    def __init__(self):
        super().__init__(
            message="AI services are currently offline for maintenance.",
            status_code=503,
            error_code="AI_KILL_SWITCH_ACTIVE"
        )

class AuthenticationError(AppException):
    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(
            message=message,
            status_code=401,
            error_code="AUTH_FAILED"
        )

class AccessDeniedError(AppException):
    """Custom permission error. Named AccessDeniedError to avoid shadowing Python's built-in PermissionError."""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            message=message,
            status_code=403,
            error_code="PERMISSION_DENIED"
        )
