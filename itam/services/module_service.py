"""
Module service: manages the catalogue of business modules.

A module's declared actions bound what any staff grant on it can
contain. Callers must invalidate the permission cache entry for
a module whose actions or active flag changed.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from itam.errors import ConflictError, NotFound
from itam.models.module import ModuleDefinition, normalize_actions
from itam.schemas.module import ModuleCreate, ModuleUpdate


class ModuleService:

    def __init__(self, db: Session):
        self.db = db

    def list_modules(self, include_inactive: bool = False) -> list[ModuleDefinition]:
        stmt = select(ModuleDefinition).order_by(ModuleDefinition.name)
        if not include_inactive:
            stmt = stmt.where(ModuleDefinition.is_active.is_(True))
        return list(self.db.execute(stmt).scalars().all())

    def create_module(self, request: ModuleCreate) -> ModuleDefinition:
        """Raises ConflictError if the key is taken."""
        key = request.key.strip()
        existing = self.db.execute(
            select(ModuleDefinition).where(ModuleDefinition.key == key)
        ).scalar_one_or_none()
        if existing:
            raise ConflictError(f"Module key '{key}' already exists")

        module = ModuleDefinition(
            key=key,
            name=request.name.strip(),
            description=request.description,
            is_active=request.is_active,
            actions=normalize_actions(request.actions),
        )
        self.db.add(module)
        self.db.flush()
        return module

    def update_module(
        self, module_id: int, request: ModuleUpdate
    ) -> tuple[dict, ModuleDefinition]:
        """Apply a partial update and return (before snapshot, module)."""
        module = self.db.get(ModuleDefinition, module_id)
        if not module:
            raise NotFound(f"Module {module_id} not found")

        before = module.snapshot()
        changes = request.model_dump(exclude_unset=True)
        if "name" in changes and changes["name"] is not None:
            module.name = changes["name"].strip()
        if "description" in changes:
            module.description = changes["description"]
        if changes.get("is_active") is not None:
            module.is_active = changes["is_active"]
        if changes.get("actions") is not None:
            module.actions = normalize_actions(changes["actions"])

        self.db.flush()
        return before, module
