"""
Application-root scope for the client layer.

KairosProvider is built once per browser context and handed to consumers
explicitly. Looking a component up without a provider is a configuration
error.
"""

import logging
from typing import Callable, Optional

from kairos.adapter.identity.local_provider import LocalIdentityProvider
from kairos.adapter.shell_navigator import ShellNavigator
from kairos.adapter.storage.json_file_storage import JsonFileStorage
from kairos.adapter.storage.memory_storage import MemoryStorage
from kairos.app.services.identity_provider import IIdentityProvider
from kairos.app.services.storage import IKeyValueStorage
from kairos.app.services.unit_of_work import UnitOfWork

from .errors import ProviderScopeError
from .organization_context import OrganizationContextResolver
from .route_guard import RouteGuard
from .session_store import SessionStore

logger = logging.getLogger(__name__)


class KairosProvider:
    def __init__(
        self,
        config,
        identity: IIdentityProvider,
        uow_factory: Callable[[], UnitOfWork],
        durable_storage: IKeyValueStorage,
        session_storage: IKeyValueStorage,
        navigator: ShellNavigator,
    ):
        self.config = config
        self.identity = identity
        self.durable_storage = durable_storage
        self.session_storage = session_storage
        self.navigator = navigator

        self.session_store = SessionStore(
            identity,
            [durable_storage, session_storage],
            navigator,
            timeout_seconds=config.AUTH_INIT_TIMEOUT_SECONDS,
            auth_prefixes=config.AUTH_STORAGE_PREFIXES,
            auth_markers=config.AUTH_STORAGE_MARKERS,
            public_route=config.PUBLIC_ROUTE,
        )
        self.organization = OrganizationContextResolver(self.session_store, uow_factory)
        self.route_guard = RouteGuard(
            self.session_store,
            public_route=config.PUBLIC_ROUTE,
            tick_seconds=config.ROUTE_GUARD_TICK_SECONDS,
            escape_after_seconds=config.ROUTE_GUARD_ESCAPE_AFTER_SECONDS,
        )
        navigator.add_reload_hook(self._on_hard_reload)
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    def start(self) -> None:
        """Start every component. Idempotent; needs a running event loop."""
        if self._started:
            return
        self._started = True
        self.session_store.start()
        self.route_guard.start()
        self.organization.start()

    def close(self) -> None:
        self.organization.close()
        self.route_guard.close()
        self.session_store.close()

    def _on_hard_reload(self, path: str) -> None:
        # Storage is left to the sign-out sweep; only in-memory state goes
        self.organization.reset()


def build_provider(
    config,
    uow_factory: Callable[[], UnitOfWork],
    durable_storage: Optional[IKeyValueStorage] = None,
) -> KairosProvider:
    """Wire the shell's default adapters into a provider"""
    if durable_storage is None:
        durable_storage = JsonFileStorage(config.DURABLE_STORAGE_PATH)
    identity = LocalIdentityProvider(uow_factory, durable_storage, config.AUTH_STORAGE_KEY)
    return KairosProvider(
        config,
        identity=identity,
        uow_factory=uow_factory,
        durable_storage=durable_storage,
        session_storage=MemoryStorage(),
        navigator=ShellNavigator(config.PUBLIC_ROUTE),
    )


def require_provider(provider: Optional[KairosProvider], consumer: str) -> KairosProvider:
    if provider is None:
        raise ProviderScopeError(f"{consumer} must be used within a KairosProvider")
    return provider
