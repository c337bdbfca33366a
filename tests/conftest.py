"""
Shared fixtures: an app on in-memory SQLite with fresh tables per test,
two users with API keys and one phone room.
"""
import pytest

from app import create_app
from config import Config
from models import db
from models.room import Room
from models.user import User
from security.api_keys import create_api_key


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    SEED_ROOMS_ON_STARTUP = False
    ROOM_LOCK_TIMEOUT_SECONDS = 5


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def service(app):
    return app.extensions["reservations"]


@pytest.fixture
def store(service):
    return service.store


@pytest.fixture
def booth(app):
    room = Room(name="Booth A", description="Corner phone booth", capacity=1)
    db.session.add(room)
    db.session.commit()
    return room.id


@pytest.fixture
def alice(app):
    user = User(email="alice@example.com", name="Alice")
    db.session.add(user)
    db.session.commit()
    return user.id


@pytest.fixture
def bob(app):
    user = User(email="bob@example.com", name="Bob")
    db.session.add(user)
    db.session.commit()
    return user.id


@pytest.fixture
def admin(app):
    user = User(email="admin@example.com", name="Admin", is_admin=True)
    db.session.add(user)
    db.session.commit()
    return user.id


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def headers_for(app):
    def _headers(user_id):
        return {"X-API-Key": create_api_key(user_id)}
    return _headers
