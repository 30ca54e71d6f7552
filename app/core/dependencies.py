"""
Request identity and tenant dependencies for FastAPI
"""

from fastapi import Request
from pydantic import BaseModel
from typing import Optional
import structlog

from app.core.auth import decode_access_token
from app.core.config import get_settings
from app.core.errors import Unauthorized, ValidationFailed

logger = structlog.get_logger(__name__)
settings = get_settings()


class Identity(BaseModel):
    """Acting identity of a request"""
    subject: str
    auth_provider_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    verified: bool = False

    @property
    def actor(self) -> str:
        """Label recorded in audit trails"""
        return self.email or self.name or self.subject or "system"


def extract_identity(request: Request) -> Optional[Identity]:
    """Read the (untrusted) identity claim carried by the X-User-* headers"""
    user_id = request.headers.get("x-user-id") or None
    user_sub = request.headers.get("x-user-sub") or None
    subject = user_id or user_sub
    if not subject:
        return None
    return Identity(
        subject=subject,
        auth_provider_id=user_sub or subject,
        email=request.headers.get("x-user-email") or None,
        name=request.headers.get("x-user-name") or None,
    )


def verify_identity(request: Request) -> Optional[Identity]:
    """Build the identity from a signed bearer token"""
    authorization = request.headers.get("authorization") or ""
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None

    payload = decode_access_token(token.strip())
    if payload is None or not payload.get("sub"):
        logger.info("Rejected bearer token")
        return None

    subject = str(payload["sub"])
    return Identity(
        subject=subject,
        auth_provider_id=subject,
        email=payload.get("email"),
        name=payload.get("name"),
        verified=True,
    )


async def get_identity(request: Request) -> Identity:
    """Resolve the acting identity or fail with 401"""
    if settings.REQUIRE_VERIFIED_IDENTITY:
        identity = verify_identity(request)
    else:
        identity = extract_identity(request)

    if identity is None:
        raise Unauthorized()
    return identity


async def get_tenant_id(request: Request) -> int:
    """Tenant id resolved by TenantContextMiddleware"""
    tenant_id = getattr(request.state, "tenant_id", None)
    if tenant_id is None:
        raise ValidationFailed(
            f"Missing {settings.TENANT_HEADER} header", code="tenant_header_missing"
        )
    return tenant_id
