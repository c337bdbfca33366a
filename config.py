import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


def engine_options(database_uri: str) -> dict:
    # SQLite: wait on a locked database file instead of failing immediately
    if database_uri.startswith("sqlite"):
        return {"connect_args": {"timeout": 15}}
    return {"pool_pre_ping": True}


class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to this file as phonebooth.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "phonebooth.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = engine_options(SQLALCHEMY_DATABASE_URI)

    # API keys issued to authenticated users
    API_KEY_HEADER = "X-API-Key"
    API_KEY_PREFIX = "pb_"

    # Max wait for another request on the same room before answering 409
    ROOM_LOCK_TIMEOUT_SECONDS = float(os.getenv("ROOM_LOCK_TIMEOUT_SECONDS", "5"))

    # Rooms created by `flask seed-rooms` and at startup
    DEFAULT_ROOMS = [
        {"name": "Green Phone Room", "description": "Small green phone booth for private calls", "capacity": 1},
        {"name": "Lovelace", "description": "Conference room named after Ada Lovelace", "capacity": 4},
    ]
    SEED_ROOMS_ON_STARTUP = os.getenv("SEED_ROOMS_ON_STARTUP", "true").lower() == "true"

    # Basic app settings
    DEBUG = False
