"""
Shared FastAPI dependencies.

Authentication and authorization run as dependencies, so they
are resolved before the endpoint body starts. A denied request
never reaches a mutation.
"""

from fastapi import Depends, Header, Request

from itam.errors import Forbidden
from itam.models.enums import Role
from itam.schemas.audit import AuditInput
from itam.security import (
    AuditContext,
    Identity,
    bearer_token,
    client_ip,
    decode_access_token,
)
from itam.services.permission_service import PermissionCache, check_permission


def get_identity(authorization: str | None = Header(default=None)) -> Identity:
    return decode_access_token(bearer_token(authorization))


def get_permission_cache(request: Request) -> PermissionCache:
    return request.app.state.permission_cache


def get_audit_context(request: Request) -> AuditContext:
    peer = request.client.host if request.client else None
    return AuditContext(
        ip=client_ip(request.headers.get("x-forwarded-for"), peer),
        user_agent=request.headers.get("user-agent", ""),
    )


def require_permission(module_key: str, action: str):
    """Dependency factory: the caller must hold action on module_key."""

    def dependency(
        identity: Identity = Depends(get_identity),
        cache: PermissionCache = Depends(get_permission_cache),
    ) -> Identity:
        check_permission(identity.role, module_key, action, cache)
        return identity

    return dependency


def require_role(*roles: Role):
    def dependency(identity: Identity = Depends(get_identity)) -> Identity:
        if identity.role not in roles:
            raise Forbidden("Forbidden")
        return identity

    return dependency


def audit_entry(
    identity: Identity | None, context: AuditContext, **fields
) -> AuditInput:
    """Build an AuditInput carrying the actor and request origin."""
    return AuditInput(
        actor_user_id=identity.user_id if identity else None,
        actor_username=identity.username if identity else None,
        ip=context.ip,
        user_agent=context.user_agent,
        **fields,
    )
