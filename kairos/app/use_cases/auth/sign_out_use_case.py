"""
Sign Out Use Case

Revokes refresh tokens according to the sign-out scope.
"""

from uuid import UUID

from kairos.app.services.unit_of_work import UnitOfWork
from kairos.domain.entities import SignOutScope
from kairos.libs.result import Error, Result, Return


class SignOutUseCase:
    """
    Use case for signing out.

    Scopes:
    - global: every refresh token of the user
    - local: only the token the current session was minted from
    - others: every token except the current one
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, user_id: UUID, refresh_token_id: UUID, scope: SignOutScope
    ) -> Result[dict]:
        async with self.uow:
            if scope == SignOutScope.global_:
                count = await self.uow.refresh_tokens.revoke_all_by_user_id(user_id)
            elif scope == SignOutScope.others:
                count = await self.uow.refresh_tokens.revoke_all_except(
                    user_id, refresh_token_id
                )
            elif scope == SignOutScope.local:
                count = int(await self.uow.refresh_tokens.revoke_by_id(refresh_token_id))
            else:
                return Return.err(Error("INVALID_SCOPE", f"Unknown scope: {scope}"))

            await self.uow.commit()

            return Return.ok({"revoked_count": count, "scope": scope.value})
