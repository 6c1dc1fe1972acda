"""
FastAPI Application Entry Point

Restaurant Order Desk - dine-in ordering backend.

Endpoints:
    - POST /api/orders: Place an order (also served at POST /orders)
    - GET /api/orders/active: Orders still in progress
    - GET /api/menu: Available dishes with categories
    - POST /api/admin/register: Create a staff account
    - GET /api/health, /api/test: Liveness checks
    - GET /*: Static frontend bundle with SPA fallback

Author: Order Desk Team
Version: 1.0.0
"""

import logging
import os
import webbrowser
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from order_desk.core.config import Settings, get_settings, setup_logging
from order_desk.database import Database, get_db
from order_desk.schemas import (
    ErrorResponse,
    HealthResponse,
    OrderCreate,
    OrderCreateResponse,
    UserRegister,
    UserRegisterResponse,
)
from order_desk.services.errors import OrderServiceError
from order_desk.services.menu import fetch_active_orders, fetch_menu
from order_desk.services.orders import OrderSubmissionService
from order_desk.services.staff import StaffAccountService

logger = logging.getLogger(__name__)

def resolve_frontend_path(settings: Settings) -> Path:
    """Relative frontend paths are taken from the working directory."""
    return Path(settings.frontend_dir).resolve()


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_order_service(request: Request) -> OrderSubmissionService:
    return request.app.state.order_service


def get_staff_service(request: Request) -> StaffAccountService:
    return request.app.state.staff_service


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Build the application with its store handle and services.

    Args:
        settings: Configuration; read from the environment when omitted
        database: Store handle; built from ``settings.database_url`` when omitted

    Returns:
        Configured FastAPI application

    Raises:
        RuntimeError: The frontend directory does not exist
    """
    settings = settings or get_settings()
    setup_logging(settings)

    frontend_path = resolve_frontend_path(settings)
    if not frontend_path.is_dir():
        logger.error(f"Frontend folder not found at {frontend_path}")
        raise RuntimeError(f"Frontend folder not found at {frontend_path}")
    index_file = frontend_path / "index.html"

    database = database or Database.from_settings(settings)

    # =========================================================================
    # APPLICATION LIFECYCLE
    # =========================================================================

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application startup and shutdown events.
        """
        # Startup
        logger.info("=" * 60)
        logger.info(f"🚀 Starting {settings.app_name}")
        logger.info(f"   Version: {settings.app_version}")
        logger.info(f"   Environment: {settings.env_mode.value}")
        logger.info(f"   Frontend: {frontend_path}")
        logger.info("=" * 60)

        await database.init_models()
        logger.info("✅ Database initialized")

        if settings.open_browser:
            url = f"http://localhost:{settings.api_port}"
            logger.info(f"Opening {url}")
            webbrowser.open(url)

        yield  # Application runs

        # Shutdown
        logger.info("Shutting down...")
        await database.dispose()
        logger.info("✅ Cleanup complete")

    app = FastAPI(
        title=settings.app_name,
        description="Dine-in ordering backend: menu, orders and staff accounts.",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Store handle and services live on app.state for the route dependencies
    app.state.settings = settings
    app.state.database = database
    app.state.order_service = OrderSubmissionService(
        database=database,
        defaults=settings.order_defaults,
        trust_client_totals=settings.trust_client_item_totals,
    )
    app.state.staff_service = StaffAccountService(
        database=database,
        hash_rounds=settings.password_hash_rounds,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================

    @app.exception_handler(OrderServiceError)
    async def service_error_handler(request: Request, exc: OrderServiceError) -> JSONResponse:
        """Service errors carry their own status; details stay server-side."""
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info(f"Rejected request body on {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all exception handler."""
        logger.exception(f"Unhandled exception: {exc}")

        content: dict[str, Any] = {"error": "Internal Server Error"}
        if settings.debug:
            content["detail"] = str(exc)
        return JSONResponse(status_code=500, content=content)

    # =========================================================================
    # HEALTH ENDPOINTS
    # =========================================================================

    @app.get("/api/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/api/test", tags=["Health"])
    async def api_test() -> dict[str, str]:
        return {"message": "Server and API are working!"}

    # =========================================================================
    # MENU
    # =========================================================================

    @app.get(
        "/api/menu",
        responses={500: {"model": ErrorResponse}},
        tags=["Menu"],
    )
    async def get_menu(db: AsyncSession = Depends(get_db)) -> list[dict[str, Any]]:
        """Available dishes with category name and slug."""
        return await fetch_menu(db)

    # =========================================================================
    # ORDER API ENDPOINTS
    # =========================================================================

    @app.post(
        "/api/orders",
        response_model=OrderCreateResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
        tags=["Orders"],
        summary="Place Order",
    )
    @app.post("/orders", response_model=OrderCreateResponse, include_in_schema=False)
    async def create_order(
        order_data: OrderCreate,
        service: OrderSubmissionService = Depends(get_order_service),
    ) -> OrderCreateResponse:
        """
        Store an order and its items in one transaction.

        Returns the new order id and its ``ORD-XXXXXXXX`` number. A missing or
        empty ``items`` list is a 400; any database failure is a 500 and
        nothing from the order is kept.
        """
        receipt = await service.submit(order_data)
        return OrderCreateResponse(
            order_id=receipt.order_id,
            order_number=receipt.order_number,
        )

    @app.get(
        "/api/orders/active",
        responses={500: {"model": ErrorResponse}},
        tags=["Orders"],
    )
    async def list_active_orders(db: AsyncSession = Depends(get_db)) -> list[dict[str, Any]]:
        """Orders still in progress, oldest first."""
        return await fetch_active_orders(db)

    # =========================================================================
    # STAFF
    # =========================================================================

    @app.post(
        "/api/admin/register",
        response_model=UserRegisterResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
        tags=["Admin"],
    )
    async def register_admin(
        data: UserRegister,
        service: StaffAccountService = Depends(get_staff_service),
    ) -> UserRegisterResponse:
        user = await service.register(data)
        return UserRegisterResponse(id=user.id, username=user.username)

    # =========================================================================
    # FRONTEND
    # =========================================================================

    def serve_index():
        if index_file.is_file():
            return FileResponse(index_file)
        logger.error(f"index.html not found in {frontend_path}")
        return PlainTextResponse("Frontend not found", status_code=500)

    @app.get("/", include_in_schema=False)
    async def index():
        return serve_index()

    @app.get("/{full_path:path}", include_in_schema=False)
    async def frontend(full_path: str):
        """Static assets from the bundle; anything else gets index.html."""
        candidate = (frontend_path / full_path).resolve()
        if candidate.is_file() and frontend_path in candidate.parents:
            return FileResponse(candidate)
        return serve_index()

    return app


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

# Placeholder app under test so importing this module has no side effects
if os.getenv("ENVIRONMENT") != "test":
    app = create_app()
else:
    app = FastAPI()


def run() -> None:
    """Run the server with uvicorn on the configured host and port."""
    import uvicorn

    settings = get_settings()
    logger.info(f"Server listening on port {settings.api_port}")
    uvicorn.run(
        "order_desk.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    run()
