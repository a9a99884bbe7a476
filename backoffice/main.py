from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
import logging

# Import database components
from backoffice.database.database import engine, Base

# Import middleware
from backoffice.common.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware

# Import routers
from backoffice.modules.auth.router import auth_router
from backoffice.modules.company.router import profile_router
from backoffice.modules.rbac.router import roles_router
from backoffice.modules.employees.router import employees_router
from backoffice.modules.categories.router import categories_router
from backoffice.modules.units.router import units_router
from backoffice.modules.brands.router import brands_router
from backoffice.modules.products.router import products_router
from backoffice.modules.customers.router import customers_router
from backoffice.modules.suppliers.router import suppliers_router
from backoffice.modules.invoices.router import invoices_router
from backoffice.modules.sync.router import sync_router

# Import models for table creation
import backoffice.modules.company.models
import backoffice.modules.employees.models
import backoffice.modules.rbac.models
import backoffice.modules.categories.models
import backoffice.modules.units.models
import backoffice.modules.brands.models
import backoffice.modules.products.models
import backoffice.modules.customers.models
import backoffice.modules.suppliers.models
import backoffice.modules.invoices.models

from backoffice.core.config import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.ENVIRONMENT == "production" else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Back office API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Strict references: {settings.STRICT_REFERENCES}")
    if not settings.email_enabled:
        logger.warning("EMAIL_USERNAME not set, account emails will only be logged")

    # Create database tables (only for development - use migrations in production)
    if settings.ENVIRONMENT == "development":
        Base.metadata.create_all(bind=engine)

    yield
    logger.info("Back office API shutting down...")


# FastAPI app
app = FastAPI(
    title="Back Office API",
    description="Multi-tenant point-of-sale back office with role-based access control and offline sync",
    version="1.0.0",
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
    lifespan=lifespan
)

# Add middleware (order matters!)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router, prefix="/api/auth")
app.include_router(profile_router, prefix="/api/profile")
app.include_router(roles_router, prefix="/api/roles")
app.include_router(employees_router, prefix="/api/employees")
app.include_router(categories_router, prefix="/api/categories")
app.include_router(units_router, prefix="/api/units")
app.include_router(brands_router, prefix="/api/brands")
app.include_router(products_router, prefix="/api/products")
app.include_router(customers_router, prefix="/api/customers")
app.include_router(suppliers_router, prefix="/api/suppliers")
app.include_router(invoices_router, prefix="/api/invoices")
app.include_router(sync_router, prefix="/api/sync")


@app.get("/")
async def read_root():
    return {
        "message": "Back office API is running",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy", "environment": settings.ENVIRONMENT}
