"""
API endpoints module
"""

from . import bookings, health, payment

__all__ = [
    "bookings",
    "health",
    "payment"
]
