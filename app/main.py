"""
Presupuestos API - Main Application Entry Point
Multi-tenant quotes backend
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import structlog

from app.core.config import get_settings
from app.core.errors import register_exception_handlers
from app.core.tenant_middleware import TenantContextMiddleware
from app.api import (
    analytics, client_branches, clients, hr_calendar, invitations, members,
    organizations, product_templates, products, public, quotes, role_permissions,
)

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = structlog.get_logger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info("Initializing Presupuestos backend", environment=settings.ENVIRONMENT)
    # Tables are created by Alembic migrations, not auto-generated
    logger.info("Database managed by Alembic migrations")

    yield

    # Shutdown
    logger.info("Shutting down Presupuestos backend")


# Create FastAPI application
app = FastAPI(
    title="Presupuestos API",
    description="Multi-tenant quotes, clients, products and HR scheduling",
    version="1.0.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

# Configure middleware stack (last added runs first)
app.add_middleware(TenantContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)

# Include routers
app.include_router(organizations.router, prefix="/organizations", tags=["organizations"])
app.include_router(invitations.router, prefix="/invitations", tags=["invitations"])
app.include_router(invitations.public_router, prefix="/invitations", tags=["invitations"])
app.include_router(members.router, prefix="/members", tags=["members"])
app.include_router(role_permissions.router, prefix="/role-permissions", tags=["role-permissions"])
app.include_router(clients.router, prefix="/clients", tags=["clients"])
app.include_router(client_branches.router, prefix="/client-branches", tags=["clients"])
app.include_router(products.router, prefix="/products", tags=["products"])
app.include_router(product_templates.router, prefix="/product-templates", tags=["products"])
app.include_router(quotes.router, prefix="/quotes", tags=["quotes"])
app.include_router(public.router, prefix="/public", tags=["public"])
app.include_router(hr_calendar.router, prefix="/hr", tags=["hr"])
app.include_router(analytics.router, prefix="/analytics", tags=["analytics"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "presupuestos-api"}


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Presupuestos API",
        "version": "1.0.0",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.ENVIRONMENT == "development",
        log_level="info",
    )
