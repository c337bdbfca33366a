from .health import health_bp
from .rooms import rooms_bp
from .booking import booking_bp
