"""
Booking model
"""

from sqlalchemy import Column, String, Enum, Numeric, DateTime, Integer
from sqlalchemy.orm import relationship
import enum

from pixstay.models.base import BaseModel


class BookingPaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    PAYMENT_FAILED = "payment_failed"


class Booking(BaseModel):
    """
    Stay reservation submitted by a guest at checkout
    """
    __tablename__ = "bookings"

    property_id = Column(String(64), nullable=False, index=True)
    user_id = Column(String(64), index=True)
    guest_name = Column(String(255))
    guest_email = Column(String(255))
    guest_phone = Column(String(50))
    nights = Column(Integer, default=1, nullable=False)
    price_per_night = Column(Numeric(10, 2), nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)
    payment_status = Column(
        Enum(BookingPaymentStatus),
        default=BookingPaymentStatus.PENDING,
        nullable=False,
        index=True
    )
    paid_at = Column(DateTime(timezone=True))

    # Relationships
    payment_transactions = relationship(
        "PaymentTransaction",
        back_populates="booking",
        order_by="PaymentTransaction.created_at"
    )

    @property
    def is_paid(self) -> bool:
        return self.payment_status == BookingPaymentStatus.PAID

    def __repr__(self):
        return f"<Booking(id={self.id}, nights={self.nights}, payment_status={self.payment_status})>"
