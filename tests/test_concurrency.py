"""
Many threads booking the same room at once, against a SQLite file so every
thread gets its own connection.
"""
import threading
from datetime import datetime, timedelta

import pytest

from app import create_app
from config import Config, engine_options
from models import db
from models.room import Room
from models.user import User
from services.booking_store import BookingStore, RoomLocks
from services.errors import SlotUnavailable
from services.reservations import ReservationService
from services.rooms import RoomDirectory

WORKERS = 8


def at(hour, minute=0):
    return datetime(2024, 1, 1, hour, minute)


@pytest.fixture
def file_app(tmp_path):
    class FileConfig(Config):
        TESTING = True
        SQLALCHEMY_DATABASE_URI = "sqlite:///" + str(tmp_path / "bookings.db")
        SQLALCHEMY_ENGINE_OPTIONS = engine_options("sqlite://")
        SEED_ROOMS_ON_STARTUP = False

    app = create_app(FileConfig)
    with app.app_context():
        db.create_all()
        room = Room(name="Booth A")
        users = [User(email=f"user{i}@example.com", name=f"User {i}") for i in range(WORKERS)]
        db.session.add(room)
        db.session.add_all(users)
        db.session.commit()
        app.config["TEST_ROOM_ID"] = room.id
        app.config["TEST_USER_IDS"] = [u.id for u in users]

    yield app

    with app.app_context():
        db.drop_all()
        db.engine.dispose()


def run_concurrently(app, services, windows):
    """Fire one create_booking per window from its own thread, all released together."""
    room_id = app.config["TEST_ROOM_ID"]
    user_ids = app.config["TEST_USER_IDS"]
    barrier = threading.Barrier(len(windows))
    results = [None] * len(windows)

    def attempt(i):
        with app.app_context():
            service = services[i % len(services)]
            barrier.wait()
            try:
                booking = service.create_booking(user_ids[i], room_id, *windows[i])
                results[i] = ("ok", booking.id)
            except SlotUnavailable:
                results[i] = ("unavailable", None)
            except Exception as exc:
                results[i] = ("error", repr(exc))
            finally:
                db.session.remove()

    threads = [threading.Thread(target=attempt, args=(i,)) for i in range(len(windows))]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    return results


def committed(app):
    with app.app_context():
        store = app.extensions["reservations"].store
        rows = store.list_by_room(app.config["TEST_ROOM_ID"])
        return [(b.start_time, b.end_time) for b in rows]


def test_identical_requests_commit_exactly_once(file_app):
    service = file_app.extensions["reservations"]
    results = run_concurrently(file_app, [service], [(at(10), at(11))] * WORKERS)

    outcomes = [r[0] for r in results]
    assert outcomes.count("ok") == 1
    assert outcomes.count("unavailable") == WORKERS - 1
    assert committed(file_app) == [(at(10), at(11))]


def test_separate_processes_rely_on_store_recheck(file_app):
    # Two services with their own room locks behave like two worker processes.
    services = [
        ReservationService(BookingStore(locks=RoomLocks()), RoomDirectory()),
        ReservationService(BookingStore(locks=RoomLocks()), RoomDirectory()),
    ]
    results = run_concurrently(file_app, services, [(at(10), at(11))] * WORKERS)

    outcomes = [r[0] for r in results]
    assert "error" not in outcomes, results
    assert outcomes.count("ok") == 1
    assert len(committed(file_app)) == 1


def test_staggered_requests_never_overlap(file_app):
    service = file_app.extensions["reservations"]
    windows = [(at(9, 15 * i), at(10, 15 * i)) for i in range(4)]
    quarter = timedelta(minutes=15)
    windows += [(at(11) + quarter * i, at(11) + quarter * (i + 1)) for i in range(4)]

    results = run_concurrently(file_app, [service], windows)

    assert all(r[0] in ("ok", "unavailable") for r in results), results
    rows = committed(file_app)
    for (s1, e1), (s2, e2) in zip(rows, rows[1:]):
        assert e1 <= s2
    # the four quarter-hour slots after 11:00 never conflict with anything
    assert sum(1 for s, _ in rows if s >= at(11)) == 4
