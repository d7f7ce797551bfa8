"""
Shared API dependencies: caller identity, role gates and collaborators
"""
from fastapi import Depends, Header, Request
from typing import Optional

from app.exceptions import Unauthenticated, Unauthorized
from app.services.blob_store import BlobStore, local_blob_store
from app.services.identity_service import Principal, Role, identity_provider
from app.utils.rate_limiter import resolve_client_ip


def get_current_principal(
    request: Request,
    x_auth_token: Optional[str] = Header(None),
    authorization: Optional[str] = Header(None),
) -> Principal:
    """Resolve the caller from X-Auth-Token or Authorization: Bearer <token>"""
    token = x_auth_token
    if not token and authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()

    principal = identity_provider.authenticate(token)
    if not principal:
        raise Unauthenticated()

    request.state.user_id = principal.subject_id
    return principal


def require_student(principal: Principal = Depends(get_current_principal)) -> Principal:
    if principal.role != Role.STUDENT:
        raise Unauthorized("Only students can perform this action")
    return principal


def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if principal.role != Role.ADMIN:
        raise Unauthorized("Admin access required")
    return principal


def get_blob_store() -> BlobStore:
    return local_blob_store


def client_ip(request: Request) -> str:
    return resolve_client_ip(request)
