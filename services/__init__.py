"""
Booking engine: interval arithmetic, the booking store, availability checks
and the reservation service that ties them together.
"""
