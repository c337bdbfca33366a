import sqlalchemy as sa
from flask import Flask, jsonify
from config import Config
from routes import health_bp, rooms_bp, booking_bp

from models import db
from flask_migrate import Migrate
from services.booking_store import BookingStore, RoomLocks
from services.errors import BookingError
from services.reservations import ReservationService
from services.rooms import RoomDirectory
from utils.seed import seed_rooms
from utils.auth_context import load_current_user


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(rooms_bp)
    app.register_blueprint(booking_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    # One store per app: the room locks must be shared by every request
    store = BookingStore(locks=RoomLocks(timeout=app.config.get("ROOM_LOCK_TIMEOUT_SECONDS", 5)))
    app.extensions["reservations"] = ReservationService(store, RoomDirectory())

    # Seed default rooms at startup (safe & idempotent); skipped until migrations have run
    if app.config.get("SEED_ROOMS_ON_STARTUP"):
        with app.app_context():
            if sa.inspect(db.engine).has_table("rooms"):
                seed_rooms()

    @app.before_request
    def _load_user():
        load_current_user()

    @app.errorhandler(BookingError)
    def _booking_error(exc):
        return jsonify(error=exc.message), exc.status_code

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp


    register_cli(app)


    return app

#-------------------------
import click
from models.user import User
from security.api_keys import create_api_key
from utils.audit import log_event

def register_cli(app):
    @app.cli.command("seed-rooms")
    def seed_rooms_command():
        """Create the default phone rooms."""
        created = seed_rooms()
        print(f"{created} room(s) created")

    @app.cli.command("create-user")
    @click.argument("email")
    @click.argument("name")
    @click.option("--admin", is_flag=True, help="Allow cancelling any booking.")
    def create_user(email, name, admin):
        """Register a user handed over by the login provider."""
        email = email.strip().lower()
        if User.query.filter_by(email=email).first():
            print("User already exists")
            return

        user = User(email=email, name=name, is_admin=admin)
        db.session.add(user)
        db.session.commit()
        print(f"{user.email} created with id {user.id}")

    @app.cli.command("create-api-key")
    @click.argument("email")
    @click.option("--name", default=None, help="Label for the key.")
    def create_api_key_command(email, name):
        """Issue an API key for a user (printed once)."""
        user = User.query.filter_by(email=email.strip().lower()).first()
        if not user:
            print("User not found")
            return

        raw_key = create_api_key(user.id, name=name)
        log_event("API_KEY_CREATE", user_id=user.id, entity="api_key", metadata={"prefix": raw_key[:8]})
        print(raw_key)

#-------------------------




if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
