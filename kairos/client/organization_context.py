"""
Organization Context Resolver

Resolves the signed-in principal's tenant context: active membership,
organization record and module permissions. Read failures degrade to an
empty context; write failures raise.
"""

import asyncio
import logging
from typing import Callable, List, Optional, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from kairos.app.services.unit_of_work import UnitOfWork
from kairos.app.use_cases.organizations import (
    ContextInfo,
    CreateGroupCommand,
    CreateOrganizationUseCase,
    JoinOrganizationUseCase,
    LeaveOrganizationUseCase,
    LoadOrganizationContextUseCase,
    MembershipInfo,
    ModulePermissionInfo,
    OrganizationCreated,
    OrganizationInfo,
    OrganizationJoined,
    SwitchContextUseCase,
    UpdateModulePermissionUseCase,
)
from kairos.domain.entities import MembershipRole, ModuleName, OrganizationType
from kairos.libs.result import Error

from .errors import AuthorizationError, OrganizationContextError
from .session_store import SessionStore

logger = logging.getLogger(__name__)

NO_ACTIVE_CONTEXT = "NO_ACTIVE_CONTEXT"


class OrganizationContextSnapshot(BaseModel):
    """Everything consumers read from the resolver"""

    organization: Optional[OrganizationInfo] = None
    membership: Optional[MembershipInfo] = None
    module_permissions: List[ModulePermissionInfo] = Field(default_factory=list)
    contexts: List[ContextInfo] = Field(default_factory=list)
    loading: bool = True
    error: Optional[str] = None
    is_admin: bool = False
    enabled_modules: List[ModuleName] = Field(default_factory=list)


class OrganizationContextResolver:
    """
    Loads tenant context whenever the principal identity changes.

    Nothing is fetched until the session store has resolved to an
    authenticated state. Each load carries a generation number; results
    from a superseded generation are dropped.
    """

    def __init__(
        self,
        session_store: SessionStore,
        uow_factory: Callable[[], UnitOfWork],
    ):
        self._store = session_store
        self._uow_factory = uow_factory

        self._organization: Optional[OrganizationInfo] = None
        self._membership: Optional[MembershipInfo] = None
        self._module_permissions: List[ModulePermissionInfo] = []
        self._contexts: List[ContextInfo] = []
        self._loading = True
        self._error: Optional[str] = None

        self._identity: Optional[UUID] = None
        self._resolved_once = False
        self._generation = 0
        self._load_task: Optional[asyncio.Task] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._closed = False

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def organization(self) -> Optional[OrganizationInfo]:
        return self._organization

    @property
    def membership(self) -> Optional[MembershipInfo]:
        return self._membership

    @property
    def module_permissions(self) -> List[ModulePermissionInfo]:
        return list(self._module_permissions)

    @property
    def contexts(self) -> List[ContextInfo]:
        return list(self._contexts)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> Optional[str]:
        return self._error

    def has_module_access(self, module_name: Union[ModuleName, str]) -> bool:
        module = ModuleName.parse(module_name)
        if module is None:
            return False
        return any(
            p.module_name == module and p.is_enabled for p in self._module_permissions
        )

    def is_admin(self) -> bool:
        return self._membership is not None and self._membership.role == MembershipRole.admin

    def snapshot(self) -> OrganizationContextSnapshot:
        return OrganizationContextSnapshot(
            organization=self._organization,
            membership=self._membership,
            module_permissions=self.module_permissions,
            contexts=self.contexts,
            loading=self._loading,
            error=self._error,
            is_admin=self.is_admin(),
            enabled_modules=[
                p.module_name for p in self._module_permissions if p.is_enabled
            ],
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self._unsubscribe is not None:
            return
        self._unsubscribe = self._store.subscribe(self._on_session_change)
        self._on_session_change(self._store)

    def close(self) -> None:
        self._closed = True
        self._generation += 1
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def reset(self) -> None:
        """Drop all cached context and re-derive it from the session store"""
        self._generation += 1
        self._identity = None
        self._resolved_once = False
        self._clear(loading=True)
        self._on_session_change(self._store)

    async def wait_until_loaded(self) -> None:
        # A newer load may replace the task while we wait
        while self._load_task is not None and not self._load_task.done():
            await asyncio.shield(self._load_task)

    def _on_session_change(self, store: SessionStore) -> None:
        if self._closed or store.loading:
            return
        user_id = store.user.id if store.user is not None else None
        if self._resolved_once and user_id == self._identity:
            return

        self._resolved_once = True
        self._identity = user_id
        self._generation += 1
        if user_id is None:
            logger.info("No user, clearing organization context")
            self._clear(loading=False)
            return

        self._start_load(user_id)

    def _clear(self, loading: bool) -> None:
        self._organization = None
        self._membership = None
        self._module_permissions = []
        self._contexts = []
        self._error = None
        self._loading = loading

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    # ------------------------------------------------------------------
    # Load sequence
    # ------------------------------------------------------------------

    async def refresh(self) -> None:
        """Re-run the full load for the current identity"""
        if self._identity is None:
            return
        self._generation += 1
        await asyncio.shield(self._start_load(self._identity))

    def _start_load(self, user_id: UUID) -> asyncio.Task:
        self._loading = True
        self._load_task = asyncio.get_running_loop().create_task(
            self._load(self._generation, user_id)
        )
        return self._load_task

    async def _load(self, generation: int, user_id: UUID) -> None:
        logger.info(f"Fetching organization context for {user_id}")
        use_case = LoadOrganizationContextUseCase(self._uow_factory())

        try:
            membership_result = await use_case.resolve_membership(user_id)
        except Exception as exc:
            logger.error(f"Error fetching membership: {exc}")
            membership_result = None

        if membership_result is None or membership_result.is_err():
            if not self._is_current(generation):
                return
            self._clear(loading=False)
            if membership_result is None:
                self._error = "Failed to load membership details"
            else:
                logger.info(f"No active context: {membership_result.error.code}")
            return

        membership = membership_result.value
        organization = None
        permissions: List[ModulePermissionInfo] = []
        contexts: List[ContextInfo] = []
        error = None

        try:
            organization_result = await use_case.resolve_organization(
                membership.organization_id
            )
            if organization_result.is_ok():
                organization = organization_result.value
            else:
                logger.error(
                    f"Error fetching organization: {organization_result.error.code}"
                )
                error = "Failed to load workspace details"
        except Exception as exc:
            logger.error(f"Error fetching organization: {exc}")
            error = "Failed to load workspace details"

        try:
            permissions_result = await use_case.resolve_module_permissions(
                membership.organization_id
            )
            permissions = permissions_result.value
        except Exception as exc:
            logger.error(f"Error fetching module permissions: {exc}")
            error = error or "Failed to load module settings"

        try:
            contexts_result = await use_case.list_contexts(
                user_id, membership.organization_id
            )
            contexts = contexts_result.value
        except Exception as exc:
            logger.error(f"Error fetching user contexts: {exc}")

        if not self._is_current(generation):
            logger.debug("Dropping stale organization context load")
            return

        self._membership = membership
        self._organization = organization
        self._module_permissions = permissions
        self._contexts = contexts
        self._error = error
        self._loading = False
        logger.info(
            f"Organization context loaded: organization={membership.organization_id}, "
            f"modules={len(permissions)}"
        )

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------

    def _require_user_id(self) -> UUID:
        user = self._store.user
        if user is None:
            raise OrganizationContextError(
                Error("NOT_AUTHENTICATED", "User not authenticated")
            )
        return user.id

    async def create_group(
        self,
        name: str,
        type: OrganizationType,
        description: Optional[str] = None,
        modules: Optional[List[ModuleName]] = None,
    ) -> OrganizationCreated:
        user_id = self._require_user_id()
        logger.info(f"Creating group: name={name}, type={type.value}")
        command = CreateGroupCommand(
            user_id=user_id,
            name=name,
            type=type,
            description=description,
            modules=modules,
        )
        result = await CreateOrganizationUseCase(self._uow_factory()).execute(command)
        if result.is_err():
            raise OrganizationContextError(result.error)

        await self.refresh()
        return result.value

    async def create_organization(
        self, name: str, description: Optional[str] = None
    ) -> OrganizationCreated:
        return await self.create_group(name, OrganizationType.organization, description)

    async def join_organization(self, organization_id: UUID) -> OrganizationJoined:
        user_id = self._require_user_id()
        result = await JoinOrganizationUseCase(self._uow_factory()).execute(
            user_id, organization_id
        )
        if result.is_err():
            raise OrganizationContextError(result.error)

        await self.refresh()
        return result.value

    async def update_module_permission(
        self, module_name: Union[ModuleName, str], is_enabled: bool
    ) -> ModulePermissionInfo:
        # Authorization is decided locally before any I/O
        if not self.is_admin():
            raise AuthorizationError("Only admins can change module permissions")
        module = ModuleName.parse(module_name)
        if module is None:
            raise OrganizationContextError(
                Error("UNKNOWN_MODULE", f"Unknown module: {module_name}")
            )

        user_id = self._require_user_id()
        organization_id = self._membership.organization_id

        # Optimistic local mirror, reverted if the write fails
        generation = self._generation
        previous = list(self._module_permissions)
        self._mirror_permission(organization_id, module, is_enabled)
        try:
            result = await UpdateModulePermissionUseCase(self._uow_factory()).execute(
                user_id, organization_id, module, is_enabled
            )
        except Exception:
            if self._still_on(generation, organization_id):
                self._module_permissions = previous
            raise
        if result.is_err():
            if self._still_on(generation, organization_id):
                self._module_permissions = previous
            raise OrganizationContextError(result.error)

        if self._still_on(generation, organization_id):
            self._module_permissions = [
                result.value if p.module_name == module else p
                for p in self._module_permissions
            ]
        else:
            logger.debug("Context changed during module update, not mirroring")
        return result.value

    def _still_on(self, generation: int, organization_id: UUID) -> bool:
        return (
            self._is_current(generation)
            and self._membership is not None
            and self._membership.organization_id == organization_id
        )

    def _mirror_permission(
        self, organization_id: UUID, module: ModuleName, is_enabled: bool
    ) -> None:
        updated = []
        found = False
        for p in self._module_permissions:
            if p.module_name == module:
                updated.append(p.model_copy(update={"is_enabled": is_enabled}))
                found = True
            else:
                updated.append(p)
        if not found:
            # Placeholder id until the write returns the real row
            updated.append(
                ModulePermissionInfo(
                    id=uuid4(),
                    organization_id=organization_id,
                    module_name=module,
                    is_enabled=is_enabled,
                )
            )
        self._module_permissions = updated

    async def switch_context(self, organization_id: UUID) -> MembershipInfo:
        user_id = self._require_user_id()
        result = await SwitchContextUseCase(self._uow_factory()).execute(
            user_id, organization_id
        )
        if result.is_err():
            raise OrganizationContextError(result.error)

        await self.refresh()
        return result.value

    async def leave_organization(self) -> MembershipInfo:
        user_id = self._require_user_id()
        if self._membership is None:
            raise OrganizationContextError(
                Error(NO_ACTIVE_CONTEXT, "User has no active organization")
            )
        result = await LeaveOrganizationUseCase(self._uow_factory()).execute(
            user_id, self._membership.organization_id
        )
        if result.is_err():
            raise OrganizationContextError(result.error)

        await self.refresh()
        return result.value
