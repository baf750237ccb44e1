"""
Permission service: role and per-module action authorization.

Three pieces, leaves first:

1. PermissionStore reads and upserts staff grants in the
   permissions table. Written actions are filtered down to what
   the module declares; unknown actions are dropped, not rejected.
2. PermissionCache is a read-through cache with a per-key TTL in
   front of the store. One instance lives for the whole process
   and is shared by every request.
3. authorize() is the single decision function every protected
   request goes through.

Staleness is bounded by the TTL. invalidate() after a write makes
the change visible immediately on this instance; other instances
pick it up when their entry expires.
"""

import enum
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterable, assert_never

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from itam.errors import Forbidden, NotFound, StorageFailure, Unauthenticated
from itam.models.enums import Role
from itam.models.module import ModuleDefinition, READ_ACTION
from itam.models.permission import Permission

logger = logging.getLogger(__name__)


class Decision(str, enum.Enum):
    ALLOW = "allow"
    DENY = "deny"


@dataclass(frozen=True)
class StaffGrant:
    """One row of the permission management screen."""
    module_key: str
    module_name: str
    available_actions: list[str]
    staff_actions: list[str]


class PermissionStore:

    def __init__(self, db: Session):
        self.db = db

    def get(self, role: Role, module_key: str) -> frozenset[str]:
        """
        Return the actions granted to role on module_key.

        Empty when no row exists, when the module is unknown or
        inactive. The result never contains an action the module
        does not currently declare.
        """
        try:
            permission = self._find(role, module_key)
            module = self._find_module(module_key)
        except SQLAlchemyError as e:
            raise StorageFailure(
                f"Could not load permissions for '{module_key}'"
            ) from e

        if permission is None or module is None or not module.is_active:
            return frozenset()
        declared = set(module.actions or [])
        return frozenset(a for a in permission.actions or [] if a in declared)

    def upsert(
        self, role: Role, module_key: str, actions: Iterable[str]
    ) -> tuple[dict | None, Permission]:
        """
        Replace the full action set for (role, module_key).

        Returns the previous snapshot (None if the row is new) and
        the persisted permission. Raises NotFound for an unknown
        module. Does not commit.
        """
        module = self._find_module(module_key)
        if module is None:
            raise NotFound(f"Module '{module_key}' not found")

        declared = set(module.actions or [])
        clean: list[str] = []
        for action in actions:
            if action in declared and action not in clean:
                clean.append(action)

        try:
            permission = self._find(role, module_key)
            before = permission.snapshot() if permission else None
            if permission is None:
                permission = Permission(role=role, module_key=module_key, actions=clean)
                self.db.add(permission)
            else:
                permission.actions = clean
            self.db.flush()
        except SQLAlchemyError as e:
            raise StorageFailure(
                f"Could not store permissions for '{module_key}'"
            ) from e
        return before, permission

    def list_staff_grants(self) -> list[StaffGrant]:
        """Active modules with what they offer and what staff currently holds."""
        modules = self.db.execute(
            select(ModuleDefinition)
            .where(ModuleDefinition.is_active.is_(True))
            .order_by(ModuleDefinition.name)
        ).scalars().all()
        grants = {
            p.module_key: p.actions
            for p in self.db.execute(
                select(Permission).where(Permission.role == Role.STAFF)
            ).scalars()
        }
        return [
            StaffGrant(
                module_key=m.key,
                module_name=m.name,
                available_actions=list(m.actions or []),
                staff_actions=list(grants.get(m.key, [])),
            )
            for m in modules
        ]

    def _find(self, role: Role, module_key: str) -> Permission | None:
        return self.db.execute(
            select(Permission).where(
                Permission.role == role,
                Permission.module_key == module_key,
            )
        ).scalar_one_or_none()

    def _find_module(self, module_key: str) -> ModuleDefinition | None:
        return self.db.execute(
            select(ModuleDefinition).where(ModuleDefinition.key == module_key)
        ).scalar_one_or_none()


def session_loader(
    session_factory: sessionmaker,
) -> Callable[[str], frozenset[str]]:
    """
    Build a cache loader that reads staff grants in its own session.

    The cache outlives any request, so it cannot borrow the
    request's session.
    """
    def load(module_key: str) -> frozenset[str]:
        db = session_factory()
        try:
            return PermissionStore(db).get(Role.STAFF, module_key)
        finally:
            db.close()
    return load


@dataclass
class _CacheEntry:
    actions: frozenset[str]
    expires_at: float


class PermissionCache:
    """
    Per-module TTL cache of staff actions.

    The lock only guards the dictionary. Loads run outside it,
    so a slow database read never blocks other modules; two
    concurrent misses on the same key both load and the last
    write wins, which the TTL bounds anyway.
    """

    def __init__(
        self,
        loader: Callable[[str], Iterable[str]],
        ttl_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._loader = loader
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}
        self._lock = threading.Lock()

    def get_actions(self, module_key: str) -> frozenset[str]:
        now = self._clock()
        with self._lock:
            hit = self._entries.get(module_key)
        if hit is not None and hit.expires_at > now:
            return hit.actions

        logger.debug("Permission cache miss for %s", module_key)
        actions = frozenset(self._loader(module_key))
        with self._lock:
            self._entries[module_key] = _CacheEntry(
                actions=actions, expires_at=self._clock() + self._ttl
            )
        return actions

    def invalidate(self, module_key: str | None = None) -> None:
        """Drop one module's entry, or everything when no key is given."""
        with self._lock:
            if module_key is None:
                self._entries.clear()
            else:
                self._entries.pop(module_key, None)
        logger.debug("Permission cache invalidated (%s)", module_key or "all")


def parse_role(value: str | Role | None) -> Role | None:
    if value is None or isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        return None


def authorize(
    role: Role | str | None,
    module_key: str,
    action: str,
    cache: PermissionCache,
) -> Decision:
    """
    Decide whether role may perform action on module_key.

    admin: everything. auditor: read only. staff: whatever the
    cached grant for the module lists. No role: nothing.
    """
    role = parse_role(role)
    if role is None:
        return Decision.DENY

    if role is Role.ADMIN:
        return Decision.ALLOW
    elif role is Role.AUDITOR:
        return Decision.ALLOW if action == READ_ACTION else Decision.DENY
    elif role is Role.STAFF:
        allowed = action in cache.get_actions(module_key)
        return Decision.ALLOW if allowed else Decision.DENY
    else:
        assert_never(role)


def check_permission(
    role: Role | str | None,
    module_key: str,
    action: str,
    cache: PermissionCache,
) -> None:
    """
    Raise instead of returning a Decision.

    Unauthenticated when there is no usable role, Forbidden when
    the role is known but not allowed.
    """
    role = parse_role(role)
    if role is None:
        raise Unauthenticated("Unauthorized")

    if authorize(role, module_key, action, cache) is Decision.DENY:
        logger.info("Denied %s on %s:%s", role.value, module_key, action)
        if role is Role.AUDITOR:
            raise Forbidden("Auditor is read-only")
        raise Forbidden(f"Not allowed to {action} in {module_key}")
