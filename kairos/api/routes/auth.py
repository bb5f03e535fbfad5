from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, EmailStr, Field

from kairos.api.error import ClientError, ServerError
from kairos.app.services.identity_provider import AuthApiError
from kairos.client.provider import KairosProvider
from kairos.client.session_store import SessionStore
from kairos.depends import get_provider, get_session_store
from kairos.domain.session import AuthUser
from kairos.libs.result import Error

router = APIRouter(prefix="/auth", tags=["Authentication"])


class SignUpRequest(BaseModel):
    """
    Sign up HTTP request payload

    Validates incoming HTTP request before it reaches the identity provider.
    """

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=8, description="User password (min 8 chars)")
    display_name: Optional[str] = Field(default=None, max_length=255)


class SignInRequest(BaseModel):
    """Sign in HTTP request payload"""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")


class AuthStateResponse(BaseModel):
    """Session store state as seen by consumers"""

    status: str
    loading: bool
    user: Optional[AuthUser] = None
    expires_at: Optional[int] = None


def auth_state(store: SessionStore) -> AuthStateResponse:
    session = store.session
    return AuthStateResponse(
        status=store.status.value,
        loading=store.loading,
        user=store.user,
        expires_at=session.expires_at if session else None,
    )


@router.post(
    "/signup", status_code=status.HTTP_201_CREATED, response_model=AuthStateResponse
)
async def sign_up(
    request: SignUpRequest, provider: KairosProvider = Depends(get_provider)
):
    """
    Sign Up

    Registers a principal and signs it in for this browser context.

    Raises:
        - 409 Conflict: Email already exists
        - 422 Unprocessable Entity: Invalid input (handled by FastAPI)
    """
    try:
        await provider.identity.sign_up(
            request.email, request.password, request.display_name
        )
    except AuthApiError as exc:
        if exc.base_error.code == "EMAIL_ALREADY_EXISTS":
            raise ClientError(exc.base_error, status_code=status.HTTP_409_CONFLICT)
        raise ServerError(exc.base_error)

    return auth_state(provider.session_store)


@router.post("/sign-in", status_code=status.HTTP_200_OK, response_model=AuthStateResponse)
async def sign_in(
    request: SignInRequest, provider: KairosProvider = Depends(get_provider)
):
    """
    Password Sign In

    Raises:
        - 401 Unauthorized: Invalid credentials
    """
    try:
        await provider.identity.sign_in_with_password(request.email, request.password)
    except AuthApiError as exc:
        if exc.base_error.code == "INVALID_CREDENTIALS":
            raise ClientError(exc.base_error, status_code=status.HTTP_401_UNAUTHORIZED)
        raise ServerError(exc.base_error)

    return auth_state(provider.session_store)


@router.get("/session", status_code=status.HTTP_200_OK, response_model=AuthStateResponse)
async def get_session(
    wait: bool = False, store: SessionStore = Depends(get_session_store)
):
    """
    Current session store state; `loading` is true only while initializing.

    With `wait=true` the call returns once the store has resolved, which is
    bounded by the auth initialization timeout.
    """
    if wait:
        await store.wait_until_resolved()
    return auth_state(store)


@router.post("/refresh", status_code=status.HTTP_200_OK, response_model=AuthStateResponse)
async def refresh(provider: KairosProvider = Depends(get_provider)):
    """
    Rotate the refresh token of the current session

    Raises:
        - 401 Unauthorized: Session revoked, expired or invalid
    """
    try:
        session = await provider.identity.refresh_session()
    except AuthApiError as exc:
        raise ClientError(exc.base_error, status_code=status.HTTP_401_UNAUTHORIZED)
    if session is None:
        raise ClientError(
            Error("NO_SESSION", "No session to refresh"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    return auth_state(provider.session_store)


@router.post("/sign-out")
async def sign_out(provider: KairosProvider = Depends(get_provider)):
    """
    Sign Out

    Always succeeds locally and navigates to the public route.
    """
    await provider.session_store.sign_out()
    return RedirectResponse(
        url=provider.navigator.location, status_code=status.HTTP_303_SEE_OTHER
    )
