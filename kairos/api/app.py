import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import SQLModel

from kairos.client.errors import ProviderScopeError
from kairos.client.provider import build_provider

from .error import ClientError, ServerError

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = exc.to_dict()
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = exc.to_dict()
    logger.error(f"Server error: {exc.base_error.code}: {exc.base_error.message}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


async def handle_provider_scope_error(request: Request, exc: ProviderScopeError):
    logger.error(f"Provider scope error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": {"code": "PROVIDER_SCOPE", "message": str(exc)}},
    )


def create_app(ApplicationConfig, session_factory=None, durable_storage=None) -> FastAPI:
    """
    Build the shell application.

    One application instance owns one KairosProvider (one browser context).
    Tests pass their own session factory and an in-memory durable storage.
    """
    from kairos.depends import AsyncSessionLocal, engine, make_uow_factory

    owns_engine = session_factory is None
    uow_factory = make_uow_factory(session_factory or AsyncSessionLocal)
    provider = build_provider(ApplicationConfig, uow_factory, durable_storage)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if owns_engine:
            async with engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)
        provider.start()
        yield
        provider.close()

    app = FastAPI(title="Kairos", version="0.1.0", lifespan=lifespan)
    app.state.kairos = provider

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from kairos.api.routes import auth, health_check, organization, views

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(views.router, tags=["Views"])
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(organization.router, tags=["Organization"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(ProviderScopeError, handle_provider_scope_error)

    return app
