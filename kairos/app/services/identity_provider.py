"""
Identity provider client contract.

The client layer depends only on these operations, never on their transport.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional, Union

from kairos.domain.entities import AuthChangeEvent, SignOutScope
from kairos.domain.session import Session
from kairos.libs.result import Error

AuthStateCallback = Callable[
    [AuthChangeEvent, Optional[Session]], Union[None, Awaitable[None]]
]


class Subscription(ABC):
    """Handle returned by on_auth_state_change"""

    @abstractmethod
    def unsubscribe(self) -> None:
        pass


class IIdentityProvider(ABC):
    """Identity provider client interface - application layer"""

    @abstractmethod
    async def get_session(self) -> Optional[Session]:
        """Return the current session restored from storage, or None"""
        pass

    @abstractmethod
    def on_auth_state_change(self, callback: AuthStateCallback) -> Subscription:
        """Push every future auth state change to callback"""
        pass

    @abstractmethod
    async def sign_out(self, scope: SignOutScope = SignOutScope.global_) -> None:
        """Invalidate the current session"""
        pass

    @abstractmethod
    async def sign_up(
        self, email: str, password: str, display_name: Optional[str] = None
    ) -> Session:
        """Register a principal and sign it in"""
        pass

    @abstractmethod
    async def sign_in_with_password(self, email: str, password: str) -> Session:
        """Exchange credentials for a session"""
        pass

    @abstractmethod
    async def refresh_session(self) -> Optional[Session]:
        """Rotate the refresh token of the current session"""
        pass


class AuthApiError(Exception):
    """Raised by identity provider operations that the provider rejected"""

    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)
