"""
Pydantic schemas for request and response validation
"""

from pixstay.schemas.payment import (
    GuestInfo,
    LineItem,
    PixTransactionCreate,
    PixMaterial,
    PixTransactionResponse,
    PostbackAck,
    TransactionSummary,
    BookingPaymentSummary
)
from pixstay.schemas.response import (
    ErrorResponse
)

__all__ = [
    "GuestInfo",
    "LineItem",
    "PixTransactionCreate",
    "PixMaterial",
    "PixTransactionResponse",
    "PostbackAck",
    "TransactionSummary",
    "BookingPaymentSummary",
    "ErrorResponse"
]
