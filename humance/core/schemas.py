from typing import Any, Dict, Generic, List, Optional, TypeVar
from pydantic import BaseModel, Field
from datetime import datetime, timezone

T = TypeVar("T")

class ErrorInfo(BaseModel):
    msg: str
    code: Optional[str] = None
    field: Optional[str] = None

class ActionResponse(BaseModel, Generic[T]):
    """
    Envelope returned by every mutating endpoint.
    Mirrors the `{success, message}` result the screens expect.
    """
    success: bool
    message: str = ""
    data: Optional[T] = None
    errors: List[ErrorInfo] = []
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary with JSON-serializable values."""
        return self.model_dump(mode="json")

    @classmethod
    def ok(cls, message: str, data: Optional[T] = None) -> "ActionResponse[T]":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, message: str, code: str = "ERROR", field: Optional[str] = None) -> "ActionResponse[T]":
        return cls(
            success=False,
            message=message,
            errors=[ErrorInfo(msg=message, code=code, field=field)]
        )
