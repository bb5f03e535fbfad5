from contextlib import asynccontextmanager

from httpx import ASGITransport, AsyncClient

PASSWORD = "SecurePass123!"
AUTH_STORAGE_KEY = "sb-kairos-auth-token"


async def sign_up(client: AsyncClient, email: str, password: str = PASSWORD) -> dict:
    response = await client.post(
        "/auth/signup", json={"email": email, "password": password}
    )
    assert response.status_code == 201
    return response.json()


async def sign_out(client: AsyncClient) -> None:
    response = await client.post("/auth/sign-out")
    assert response.status_code == 303


async def create_organization(client: AsyncClient, name: str, **extra) -> dict:
    response = await client.post("/organizations", json={"name": name, **extra})
    assert response.status_code == 201
    return response.json()


@asynccontextmanager
async def browser_context(session_factory, durable_storage):
    """A fresh application over an existing durable storage, like a page reload"""
    from config import ApplicationConfig
    from kairos.api.app import create_app

    app = create_app(
        ApplicationConfig,
        session_factory=session_factory,
        durable_storage=durable_storage,
    )
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield app, client
    finally:
        app.state.kairos.close()
