from pydantic import BaseModel, Field, field_validator
from typing import List

from tradinta.rbac import ROLES


class UpdateRestrictionsRequest(BaseModel):
    """
    PUT /users/{id}/restrictions

    Lists the role permissions the user keeps. Every other permission the
    role grants becomes a restriction.
    """
    allowed_permissions: List[str] = Field(default_factory=list)


class UpdateRoleRequest(BaseModel):
    """PUT /users/{id}/role"""
    role: str = Field(..., min_length=1, max_length=64)

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        if v not in ROLES:
            raise ValueError(f"Unknown role '{v}'")
        return v
