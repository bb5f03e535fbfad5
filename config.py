import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./kairos.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    ACCESS_TOKEN_TTL_SECONDS = int(data.get("ACCESS_TOKEN_TTL_SECONDS", 3600))
    REFRESH_TOKEN_TTL_DAYS = int(data.get("REFRESH_TOKEN_TTL_DAYS", 30))

    # Client session lifecycle
    AUTH_INIT_TIMEOUT_SECONDS = float(data.get("AUTH_INIT_TIMEOUT_SECONDS", 5))
    ROUTE_GUARD_TICK_SECONDS = float(data.get("ROUTE_GUARD_TICK_SECONDS", 1))
    ROUTE_GUARD_ESCAPE_AFTER_SECONDS = float(
        data.get("ROUTE_GUARD_ESCAPE_AFTER_SECONDS", 20)
    )
    PUBLIC_ROUTE = data.get("PUBLIC_ROUTE", "/")

    # Browser storage emulation
    DURABLE_STORAGE_PATH = data.get(
        "DURABLE_STORAGE_PATH", os.path.join(ROOT_PATH, ".kairos", "local_storage.json")
    )
    AUTH_STORAGE_KEY = data.get("AUTH_STORAGE_KEY", "sb-kairos-auth-token")
    AUTH_STORAGE_PREFIXES = data.get("AUTH_STORAGE_PREFIXES", ["kairos.auth."])
    AUTH_STORAGE_MARKERS = data.get("AUTH_STORAGE_MARKERS", ["sb-"])
