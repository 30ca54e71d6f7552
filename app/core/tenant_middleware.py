"""
Tenant context middleware for multi-tenant isolation
"""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable, Optional, Pattern
import re
import structlog

from app.core.config import get_settings
from app.core.errors import DomainError, ValidationFailed, error_response

logger = structlog.get_logger(__name__)
settings = get_settings()


# (method, path) pairs served without a tenant header. None matches any method.
PUBLIC_ROUTES: list[tuple[Optional[str], Pattern[str]]] = [
    ("GET", re.compile(r"^/health/?$")),
    ("GET", re.compile(r"^/$")),
    (None, re.compile(r"^/(docs|redoc)(/.*)?$")),
    ("GET", re.compile(r"^/openapi\.json$")),
    ("GET", re.compile(r"^/public/quotes/[^/]+/?$")),
    ("POST", re.compile(r"^/organizations/?$")),
    ("GET", re.compile(r"^/organizations/me/?$")),
    ("GET", re.compile(r"^/invitations/[^/]+/?$")),
    ("POST", re.compile(r"^/invitations/[^/]+/accept/?$")),
]

# Plain ASCII digits only; ids are 32-bit INTEGER columns
TENANT_ID_PATTERN = re.compile(r"^[0-9]+$")
MAX_TENANT_ID = 2**31 - 1


def is_public_route(method: str, path: str) -> bool:
    if method == "OPTIONS":
        return True
    return any(
        (allowed is None or allowed == method) and pattern.match(path)
        for allowed, pattern in PUBLIC_ROUTES
    )


def parse_tenant_header(value: Optional[str]) -> int:
    """Validate the raw tenant header value and return the tenant id"""
    header = settings.TENANT_HEADER
    if value is None or not value.strip():
        raise ValidationFailed(f"Missing {header} header", code="tenant_header_missing")
    raw = value.strip()
    if not TENANT_ID_PATTERN.match(raw):
        raise ValidationFailed(
            f"Invalid {header} header (not numeric)", code="tenant_header_invalid"
        )
    tenant_id = int(raw)
    if tenant_id <= 0 or tenant_id > MAX_TENANT_ID:
        raise ValidationFailed(
            f"Invalid {header} header (must be a positive 32-bit integer)",
            code="tenant_header_invalid",
        )
    return tenant_id


class TenantContextMiddleware(BaseHTTPMiddleware):
    """Middleware to extract and set tenant context"""

    async def dispatch(self, request: Request, call_next: Callable):
        request.state.tenant_id = None

        if is_public_route(request.method, request.url.path):
            return await call_next(request)

        try:
            tenant_id = parse_tenant_header(request.headers.get(settings.TENANT_HEADER))
        except DomainError as exc:
            logger.info("Tenant header rejected", path=request.url.path, code=exc.code)
            return error_response(exc.status_code, exc.to_body())

        # Store tenant context in request state
        request.state.tenant_id = tenant_id
        logger.debug(f"Tenant context: {tenant_id}")

        response = await call_next(request)
        return response
