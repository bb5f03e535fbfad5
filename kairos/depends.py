from typing import Callable

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from kairos.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from kairos.app.services.unit_of_work import UnitOfWork
from kairos.client.organization_context import OrganizationContextResolver
from kairos.client.provider import KairosProvider, require_provider
from kairos.client.route_guard import GuardDecision, RouteGuard
from kairos.client.session_store import SessionStore

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


def make_uow_factory(session_factory=AsyncSessionLocal) -> Callable[[], UnitOfWork]:
    def factory() -> UnitOfWork:
        return SqlAlchemyUnitOfWork(session_factory)

    return factory


async def get_provider(request: Request) -> KairosProvider:
    """
    Resolve the application-root provider.

    Raises:
        ProviderScopeError: if the app was built without a provider
    """
    provider = require_provider(
        getattr(request.app.state, "kairos", None), "Session and organization context"
    )
    # Lifespan normally starts it; ASGI transports without lifespan rely on this
    provider.start()
    return provider


async def get_session_store(provider: KairosProvider = Depends(get_provider)) -> SessionStore:
    return provider.session_store


async def get_organization_context(
    provider: KairosProvider = Depends(get_provider),
) -> OrganizationContextResolver:
    return provider.organization


async def get_route_guard(provider: KairosProvider = Depends(get_provider)) -> RouteGuard:
    return provider.route_guard


async def route_admission(guard: RouteGuard = Depends(get_route_guard)) -> GuardDecision:
    return guard.evaluate()
