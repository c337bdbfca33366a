from .db import db
from .user import User
from .room import Room
from .booking import Booking
from .api_key import ApiKey
from .audit_log import AuditLog
