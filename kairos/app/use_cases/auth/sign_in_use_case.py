"""
Sign In Use Case

Exchanges email and password for a session.
"""

import bcrypt

from kairos.app.services.unit_of_work import UnitOfWork
from kairos.domain.base import utcnow
from kairos.domain.session import Session
from kairos.libs.result import Error, Result, Return

from .tokens import issue_session


class SignInUseCase:
    """
    Use case for password sign-in.

    Business Rules:
    - Constant-time password comparison to prevent timing attacks
    - Creates a new refresh token row per sign-in
    - Updates user.last_sign_in_at
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, email: str, password: str) -> Result[Session]:
        async with self.uow:
            user = await self.uow.users.get_by_email(email)

            # Always perform a hash check even if user not found
            if user is None:
                bcrypt.checkpw(b"dummy_password", bcrypt.hashpw(b"dummy", bcrypt.gensalt(12)))
                return Return.err(
                    Error("INVALID_CREDENTIALS", "Invalid email or password")
                )

            if not bcrypt.checkpw(password.encode(), user.password_hash.encode()):
                return Return.err(
                    Error("INVALID_CREDENTIALS", "Invalid email or password")
                )

            session = await issue_session(self.uow, user)

            user.last_sign_in_at = utcnow()
            await self.uow.users.update(user)

            await self.uow.commit()

            return Return.ok(session)
