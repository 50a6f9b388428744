"""
Payment transaction model: one row per gateway attempt
"""

from sqlalchemy import Column, String, Integer, Text, JSON, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship

from pixstay.models.base import BaseModel

HURAPAYMENTS_PROVIDER = "hurapayments"


class PaymentTransaction(BaseModel):
    """
    Attempt to collect a booking payment through the gateway.

    `status` mirrors the provider's vocabulary and is not a closed enum.
    Rows are never deleted; a booking keeps its whole attempt history.
    """
    __tablename__ = "payment_transactions"
    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_payment_transactions_amount_positive"),
        UniqueConstraint("provider", "provider_transaction_id", name="uq_payment_transactions_provider_tx"),
    )

    booking_id = Column(String(64), ForeignKey("bookings.id"), nullable=False, index=True)
    provider = Column(String(50), default=HURAPAYMENTS_PROVIDER, nullable=False)
    provider_transaction_id = Column(String(255), index=True)
    amount_cents = Column(Integer, nullable=False)
    status = Column(String(50), nullable=False, index=True)
    pix_qr_code = Column(Text)
    pix_copy_paste = Column(Text)
    raw = Column(JSON, default=dict, nullable=False)

    # Relationships
    booking = relationship("Booking", back_populates="payment_transactions")

    def __repr__(self):
        return (
            f"<PaymentTransaction(id={self.id}, booking_id={self.booking_id}, "
            f"provider_transaction_id={self.provider_transaction_id}, status={self.status})>"
        )
