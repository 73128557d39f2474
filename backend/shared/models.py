"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class AuthenticatedUser(BaseModel):
    """
    Represents the signed-in user.

    Populated from the platform JWT and handed to every component that
    needs to know who "self" is. Treated as a read-only fact once resolved.
    """

    id: str = Field(..., description="User ID (UUID from Supabase)")
    email: EmailStr = Field(..., description="User's email address")
    email_verified: bool = Field(default=False, description="Whether email is verified")
    last_sign_in: Optional[datetime] = Field(None, description="Last sign-in time")
    role: str = Field(default="user", description="User role")

    model_config = {
        "frozen": True,
        "extra": "ignore",
    }

    @property
    def handle(self) -> str:
        """Email local part, used as the default username."""
        return self.email.split("@")[0]
