"""
Pydantic schemas for module definitions and staff permissions.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# --- Module Schemas ---

class ModuleCreate(BaseModel):
    key: str = Field(min_length=2, max_length=100)
    name: str = Field(min_length=2, max_length=200)
    description: str | None = None
    is_active: bool = True
    actions: list[str] | None = None


class ModuleUpdate(BaseModel):
    """Partial update; only fields that are sent are changed."""
    name: str | None = Field(default=None, min_length=2, max_length=200)
    description: str | None = None
    is_active: bool | None = None
    actions: list[str] | None = None


class ModuleResponse(BaseModel):
    id: int
    key: str
    name: str
    description: str | None
    is_active: bool
    actions: list[str]
    created_at: datetime

    model_config = {"from_attributes": True}


# --- Permission Schemas ---

class StaffPermissionUpsert(BaseModel):
    module_key: str = Field(min_length=2, max_length=100)
    actions: list[str] = Field(default_factory=list)


class PermissionResponse(BaseModel):
    role: str
    module_key: str
    actions: list[str]


class StaffGrantResponse(BaseModel):
    module_key: str
    module_name: str
    available_actions: list[str]
    staff_actions: list[str]

    model_config = {"from_attributes": True}
