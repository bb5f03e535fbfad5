"""
Sign Up Use Case

Registers a principal with a profile and signs it in.
"""

from typing import Optional

from kairos.app.services.unit_of_work import UnitOfWork
from kairos.domain.base import utcnow
from kairos.domain.entities import Profile, User
from kairos.domain.session import Session
from kairos.libs.result import Error, Result, Return

from .tokens import hash_secret, issue_session


class SignUpUseCase:
    """
    Sign Up Use Case

    Business Logic:
    1. Reject emails that are already registered
    2. Hash password with bcrypt cost factor 12
    3. Create User and an empty Profile (no organization yet)
    4. Issue a refresh token and session
    5. Commit transaction atomically
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, email: str, password: str, display_name: Optional[str] = None
    ) -> Result[Session]:
        async with self.uow:
            existing_user = await self.uow.users.get_by_email(email)
            if existing_user:
                return Return.err(
                    Error("EMAIL_ALREADY_EXISTS", "Email already registered")
                )

            user = User(
                email=email,
                password_hash=hash_secret(password),
                display_name=display_name,
                last_sign_in_at=utcnow(),
            )
            user = await self.uow.users.create(user)

            await self.uow.profiles.create(
                Profile(user_id=user.id, display_name=display_name)
            )

            session = await issue_session(self.uow, user)

            await self.uow.commit()

            return Return.ok(session)
