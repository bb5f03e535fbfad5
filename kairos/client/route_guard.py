"""
Route Guard

Admission control for authenticated-only views. It is a pure function of
session store state plus a presentation timer; it is not a data-access
security boundary.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from .session_store import SessionStore

logger = logging.getLogger(__name__)


class GuardOutcome(str, Enum):
    checking = "checking"
    admitted = "admitted"
    denied = "denied"


@dataclass
class WaitingViewState:
    message: str
    elapsed_seconds: float
    show_escape_hatch: bool
    escape_actions: List[str] = field(default_factory=list)


@dataclass
class GuardDecision:
    outcome: GuardOutcome
    redirect_to: Optional[str] = None
    replace: bool = False
    waiting: Optional[WaitingViewState] = None
    requires_onboarding: bool = False


def decide(loading: bool, has_user: bool) -> GuardOutcome:
    if loading:
        return GuardOutcome.checking
    if not has_user:
        return GuardOutcome.denied
    return GuardOutcome.admitted


class WaitingView:
    """
    Elapsed-time ticker shown while the session store is still checking.

    After `escape_after_seconds` it offers refresh / return to sign-in. It
    never changes auth state itself.
    """

    MESSAGE = "Verifying authentication..."
    ESCAPE_ACTIONS = ["refresh", "sign_in"]

    def __init__(self, tick_seconds: float = 1.0, escape_after_seconds: float = 20.0):
        self.tick_seconds = tick_seconds
        self.escape_after_seconds = escape_after_seconds
        self.elapsed_seconds = 0.0
        self._escape_logged = False
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def show_escape_hatch(self) -> bool:
        return self.elapsed_seconds >= self.escape_after_seconds

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._tick())

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self.tick_seconds)
            self.elapsed_seconds += self.tick_seconds
            if self.show_escape_hatch and not self._escape_logged:
                self._escape_logged = True
                logger.warning(
                    f"Still verifying authentication after {self.elapsed_seconds:.0f}s"
                )

    def state(self) -> WaitingViewState:
        return WaitingViewState(
            message=self.MESSAGE,
            elapsed_seconds=self.elapsed_seconds,
            show_escape_hatch=self.show_escape_hatch,
            escape_actions=list(self.ESCAPE_ACTIONS) if self.show_escape_hatch else [],
        )


class RouteGuard:
    def __init__(
        self,
        session_store: SessionStore,
        public_route: str = "/",
        tick_seconds: float = 1.0,
        escape_after_seconds: float = 20.0,
    ):
        self._store = session_store
        self.public_route = public_route
        self.waiting_view = WaitingView(tick_seconds, escape_after_seconds)
        self._unsubscribe: Optional[Callable[[], None]] = None

    def start(self) -> None:
        if self._unsubscribe is not None:
            return
        self._unsubscribe = self._store.subscribe(self._on_session_change)
        if self._store.loading:
            self.waiting_view.start()

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.waiting_view.stop()

    def _on_session_change(self, store: SessionStore) -> None:
        if not store.loading:
            self.waiting_view.stop()

    def evaluate(self, requires_onboarding: bool = False) -> GuardDecision:
        """
        Decide whether a protected view may render.

        `requires_onboarding` is carried through for the onboarding flow and
        not enforced here.
        """
        outcome = decide(self._store.loading, self._store.user is not None)

        if outcome == GuardOutcome.checking:
            self.waiting_view.start()
            return GuardDecision(
                outcome=outcome,
                waiting=self.waiting_view.state(),
                requires_onboarding=requires_onboarding,
            )

        if outcome == GuardOutcome.denied:
            logger.info(f"No user found, redirecting to {self.public_route}")
            return GuardDecision(
                outcome=outcome,
                redirect_to=self.public_route,
                replace=True,
                requires_onboarding=requires_onboarding,
            )

        return GuardDecision(outcome=outcome, requires_onboarding=requires_onboarding)
