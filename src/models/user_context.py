"""Read-only session snapshot injected into services."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Account roles."""
    USER = "usuario"
    BROKER = "corretor"
    AGENCY = "imobiliaria"


class UserContext(BaseModel):
    """Signed-in user and role, as resolved by the auth layer."""
    model_config = ConfigDict(frozen=True)

    user_id: Optional[str] = Field(None, description="Auth user id, None when anonymous")
    email: Optional[str] = None
    role: Optional[Role] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)
