"""
Database models
"""

from pixstay.models.booking import Booking, BookingPaymentStatus
from pixstay.models.payment_transaction import PaymentTransaction, HURAPAYMENTS_PROVIDER

__all__ = [
    "Booking",
    "BookingPaymentStatus",
    "PaymentTransaction",
    "HURAPAYMENTS_PROVIDER"
]
