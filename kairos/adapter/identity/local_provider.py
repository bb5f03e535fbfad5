"""
Local identity provider.

Implements the identity provider client contract on top of the SQL tables
and JWT tokens, persisting the current session in durable storage under a
single provider-namespaced key.
"""

import asyncio
import inspect
import logging
from typing import Callable, List, Optional, Set

from pydantic import ValidationError

from kairos.api.utils.jwt import verify_jwt
from kairos.app.services.identity_provider import (
    AuthApiError,
    AuthStateCallback,
    IIdentityProvider,
    Subscription,
)
from kairos.app.services.storage import IKeyValueStorage
from kairos.app.services.unit_of_work import UnitOfWork
from kairos.app.use_cases.auth import (
    RefreshSessionUseCase,
    SignInUseCase,
    SignOutUseCase,
    SignUpUseCase,
)
from kairos.app.use_cases.auth.tokens import split_refresh_token
from kairos.domain.entities import AuthChangeEvent, SignOutScope
from kairos.domain.session import Session

logger = logging.getLogger(__name__)


class _LocalSubscription(Subscription):
    def __init__(self, provider: "LocalIdentityProvider", callback: AuthStateCallback):
        self._provider = provider
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self._provider._remove_subscriber(self.callback)


class LocalIdentityProvider(IIdentityProvider):
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        storage: IKeyValueStorage,
        storage_key: str,
    ):
        self._uow_factory = uow_factory
        self._storage = storage
        self._storage_key = storage_key
        self._current: Optional[Session] = None
        self._subscribers: List[AuthStateCallback] = []
        self._tasks: Set[asyncio.Task] = set()
        # Concurrent restores must not rotate the same refresh token twice
        self._refresh_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def on_auth_state_change(self, callback: AuthStateCallback) -> Subscription:
        self._subscribers.append(callback)
        subscription = _LocalSubscription(self, callback)
        # New subscribers get an INITIAL_SESSION push once storage is read
        task = asyncio.get_running_loop().create_task(self._emit_initial(subscription))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return subscription

    def _remove_subscriber(self, callback: AuthStateCallback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    async def _emit_initial(self, subscription: _LocalSubscription) -> None:
        try:
            session = await self.get_session()
        except Exception as exc:
            logger.error(f"Initial session lookup failed: {exc}")
            return
        if subscription.active:
            await self._call(subscription.callback, AuthChangeEvent.INITIAL_SESSION, session)

    async def _call(self, callback, event: AuthChangeEvent, session: Optional[Session]) -> None:
        try:
            result = callback(event, session)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            logger.error(f"Auth state subscriber failed on {event.value}: {exc}")

    async def _notify(self, event: AuthChangeEvent, session: Optional[Session]) -> None:
        for callback in list(self._subscribers):
            await self._call(callback, event, session)

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def _save(self, session: Session) -> None:
        self._current = session
        self._storage.set_item(self._storage_key, session.model_dump_json())

    def _forget(self) -> None:
        self._current = None
        self._storage.remove_item(self._storage_key)

    def _read_stored(self) -> Optional[Session]:
        raw = self._storage.get_item(self._storage_key)
        if raw is None:
            return None
        try:
            return Session.model_validate_json(raw)
        except ValidationError:
            logger.warning("Discarding malformed stored session")
            self._forget()
            return None

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    async def get_session(self) -> Optional[Session]:
        stored = self._read_stored()
        if stored is None:
            self._current = None
            return None

        if not stored.is_expired() and verify_jwt(stored.access_token) is not None:
            self._current = stored
            return stored

        async with self._refresh_lock:
            # Another caller may have refreshed while we waited
            latest = self._read_stored()
            if latest is None or latest.refresh_token != stored.refresh_token:
                self._current = latest
                return latest

            logger.info("Stored access token expired, refreshing")
            result = await RefreshSessionUseCase(self._uow_factory()).execute(
                stored.refresh_token
            )
            if result.is_err():
                logger.warning(
                    f"Stored session could not be refreshed: {result.error.code}"
                )
                self._forget()
                return None

            self._save(result.value)
        await self._notify(AuthChangeEvent.TOKEN_REFRESHED, result.value)
        return result.value

    async def refresh_session(self) -> Optional[Session]:
        async with self._refresh_lock:
            current = self._current or self._read_stored()
            if current is None:
                return None

            result = await RefreshSessionUseCase(self._uow_factory()).execute(
                current.refresh_token
            )
            if result.is_err():
                raise AuthApiError(result.error)

            self._save(result.value)
        await self._notify(AuthChangeEvent.TOKEN_REFRESHED, result.value)
        return result.value

    async def sign_up(
        self, email: str, password: str, display_name: Optional[str] = None
    ) -> Session:
        result = await SignUpUseCase(self._uow_factory()).execute(
            email, password, display_name
        )
        if result.is_err():
            raise AuthApiError(result.error)

        self._save(result.value)
        await self._notify(AuthChangeEvent.SIGNED_IN, result.value)
        return result.value

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        result = await SignInUseCase(self._uow_factory()).execute(email, password)
        if result.is_err():
            raise AuthApiError(result.error)

        self._save(result.value)
        await self._notify(AuthChangeEvent.SIGNED_IN, result.value)
        return result.value

    async def sign_out(self, scope: SignOutScope = SignOutScope.global_) -> None:
        current = self._current or self._read_stored()

        if current is not None:
            parts = split_refresh_token(current.refresh_token)
            if parts is not None:
                result = await SignOutUseCase(self._uow_factory()).execute(
                    current.user.id, parts[0], scope
                )
                if result.is_err():
                    raise AuthApiError(result.error)

        # "others" keeps this client signed in
        if scope == SignOutScope.others:
            return

        self._forget()
        await self._notify(AuthChangeEvent.SIGNED_OUT, None)
