"""exclusion constraint against overlapping bookings (PostgreSQL only)

Two CONFIRMED bookings for the same room may not share any instant.
tsrange '[)' matches the application rule: end == next start is allowed.
Other backends rely on the store's locked re-check.

Revision ID: e5c07a93b1f4
Revises: 8b4e61d0c2a5
Create Date: 2026-10-06 10:45:00.000000

"""
from alembic import op


# revision identifiers, used by Alembic.
revision = 'e5c07a93b1f4'
down_revision = '8b4e61d0c2a5'
branch_labels = None
depends_on = None


def _is_postgres():
    return op.get_bind().dialect.name == 'postgresql'


def upgrade():
    if not _is_postgres():
        return
    op.execute('CREATE EXTENSION IF NOT EXISTS btree_gist')
    op.execute(
        "ALTER TABLE bookings ADD CONSTRAINT no_overlapping_bookings "
        "EXCLUDE USING gist (room_id WITH =, tsrange(start_time, end_time, '[)') WITH &&) "
        "WHERE (status = 'CONFIRMED')"
    )


def downgrade():
    if not _is_postgres():
        return
    op.execute('ALTER TABLE bookings DROP CONSTRAINT IF EXISTS no_overlapping_bookings')
