"""
Session Store

Single source of truth for "is there a signed-in user" in one browser
context. Two producers feed one reducer during initialization: the provider
event subscription and a one-shot session lookup.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence

from kairos.app.services.identity_provider import IIdentityProvider, Subscription
from kairos.app.services.navigator import INavigator
from kairos.app.services.storage import IKeyValueStorage
from kairos.domain.entities import AuthChangeEvent, SignOutScope
from kairos.domain.session import AuthUser, Session

from .timeout_guard import AuthTimeoutGuard

logger = logging.getLogger(__name__)

SessionListener = Callable[["SessionStore"], None]


class AuthStatus(str, Enum):
    initializing = "initializing"
    authenticated = "authenticated"
    unauthenticated = "unauthenticated"


def is_auth_key(key: str, prefixes: Iterable[str], markers: Iterable[str]) -> bool:
    return any(key.startswith(p) for p in prefixes) or any(m in key for m in markers)


def clean_up_auth_state(
    storages: Sequence[IKeyValueStorage],
    prefixes: Iterable[str],
    markers: Iterable[str],
) -> int:
    """Remove every auth-namespaced key from each storage. Returns count removed."""
    prefixes = list(prefixes)
    markers = list(markers)
    removed = 0
    for storage in storages:
        for key in storage.keys():
            if is_auth_key(key, prefixes, markers):
                storage.remove_item(key)
                removed += 1
    return removed


class SessionStore:
    """
    Session store state machine.

    INITIALIZING -> AUTHENTICATED | UNAUTHENTICATED. Once resolved it never
    returns to INITIALIZING; later provider events move it between the two
    resolved states.
    """

    def __init__(
        self,
        identity: IIdentityProvider,
        storages: Sequence[IKeyValueStorage],
        navigator: INavigator,
        timeout_seconds: float = 5.0,
        auth_prefixes: Iterable[str] = ("kairos.auth.",),
        auth_markers: Iterable[str] = ("sb-",),
        public_route: str = "/",
    ):
        self._identity = identity
        self._storages = list(storages)
        self._navigator = navigator
        self._auth_prefixes = list(auth_prefixes)
        self._auth_markers = list(auth_markers)
        self._public_route = public_route

        self._status = AuthStatus.initializing
        self._session: Optional[Session] = None
        self._user: Optional[AuthUser] = None

        self._listeners: List[SessionListener] = []
        self._subscription: Optional[Subscription] = None
        self._initial_check: Optional[asyncio.Task] = None
        self._event_count = 0
        self._started = False
        self._closed = False
        self._timeout_guard = AuthTimeoutGuard(timeout_seconds, self._on_timeout)

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def status(self) -> AuthStatus:
        return self._status

    @property
    def loading(self) -> bool:
        return self._status == AuthStatus.initializing

    @property
    def user(self) -> Optional[AuthUser]:
        return self._user

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def timeout_guard(self) -> AuthTimeoutGuard:
        return self._timeout_guard

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener called on every state change. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as exc:
                logger.error(f"Session listener failed: {exc}")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Begin initialization. Must be called from a running event loop."""
        if self._started:
            return
        self._started = True
        logger.info("Initializing auth state")

        self._timeout_guard.arm()
        self._subscription = self._identity.on_auth_state_change(self._on_auth_event)
        self._initial_check = asyncio.get_running_loop().create_task(
            self._check_initial_session(self._event_count)
        )

    async def wait_until_resolved(self) -> None:
        """Wait for the store to leave INITIALIZING (bounded by the timeout guard)."""
        if not self.loading:
            return
        resolved = asyncio.Event()
        unsubscribe = self.subscribe(lambda store: None if store.loading else resolved.set())
        try:
            if self.loading:
                await resolved.wait()
        finally:
            unsubscribe()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        logger.info("Cleaning up auth subscription")
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self._timeout_guard.cancel()
        self._listeners.clear()

    # ------------------------------------------------------------------
    # Producers
    # ------------------------------------------------------------------

    async def _check_initial_session(self, events_seen: int) -> None:
        try:
            session = await self._identity.get_session()
            logger.info(
                f"Initial session check: has_session={session is not None}, "
                f"user_id={session.user.id if session else None}"
            )
        except Exception as exc:
            logger.error(f"Initial session check failed, treating as signed out: {exc}")
            session = None

        # A provider event arrived while the lookup was in flight; that event
        # already carries a more recent view of the same session.
        if self._event_count != events_seen and not self.loading:
            logger.debug("Dropping superseded initial session check result")
            return
        self._apply("initial_check", session)

    def _on_auth_event(self, event: AuthChangeEvent, session: Optional[Session]) -> None:
        logger.info(
            f"Auth state changed: event={event.value}, has_session={session is not None}, "
            f"user_id={session.user.id if session else None}"
        )
        self._event_count += 1
        self._apply(event.value, session)

    # ------------------------------------------------------------------
    # Reducer
    # ------------------------------------------------------------------

    def _apply(self, source: str, session: Optional[Session]) -> None:
        if self._closed:
            return

        was_loading = self.loading
        self._session = session
        self._user = session.user if session is not None else None
        self._status = (
            AuthStatus.authenticated if session is not None else AuthStatus.unauthenticated
        )

        if was_loading:
            self._timeout_guard.cancel()
            logger.info(f"Auth state resolved by {source}: {self._status.value}")

        self._notify()

    def _on_timeout(self) -> None:
        if self._closed or not self.loading:
            return
        logger.warning("Continuing without a session")
        self._apply("timeout", None)

    # ------------------------------------------------------------------
    # Sign out
    # ------------------------------------------------------------------

    def clean_up_auth_state(self) -> int:
        return clean_up_auth_state(self._storages, self._auth_prefixes, self._auth_markers)

    async def sign_out(self) -> None:
        """
        Sign out locally no matter what the provider says.

        Never raises: storage is swept, the provider is asked to revoke
        globally (best effort), local state is cleared and a hard navigation
        to the public route discards every other piece of in-memory state.
        """
        try:
            logger.info("Signing out")
            removed = self.clean_up_auth_state()
            logger.info(f"Removed {removed} auth storage keys")
            try:
                await self._identity.sign_out(SignOutScope.global_)
            except Exception as exc:
                logger.error(f"Sign out error (continuing anyway): {exc}")
        except Exception as exc:
            logger.error(f"Error signing out: {exc}")
        finally:
            self._session = None
            self._user = None
            if not self._closed:
                self._status = AuthStatus.unauthenticated
                self._timeout_guard.cancel()
                self._notify()
            try:
                self._navigator.hard_reload(self._public_route)
            except Exception as exc:
                logger.error(f"Navigation after sign out failed: {exc}")
