from pydantic import BaseModel, EmailStr
from typing import List, Optional
from humance.models.user import UserRole

class LoginRequest(BaseModel):
    email: EmailStr
    password: str
    role: Optional[UserRole] = None

class Token(BaseModel):
    access_token: str
    token_type: str
    user: Optional[dict] = None

class AuthContext(BaseModel):
    """
    Request-scoped identity handed to every service operation.
    Built once per request from the bearer token and the users table.
    """
    user_id: int
    name: str
    role: UserRole
    department_id: Optional[int] = None
    led_department_ids: List[int] = []

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_manager(self) -> bool:
        return self.role == UserRole.MANAGER

    @property
    def is_collaborator(self) -> bool:
        return self.role == UserRole.COLLABORATOR

    @property
    def can_view_team(self) -> bool:
        return self.role in (UserRole.ADMIN, UserRole.MANAGER)
