"""
Booking payment status endpoints
"""

from fastapi import APIRouter, Depends

from pixstay.api.deps import get_payment_store
from pixstay.core.exceptions import NotFoundError
from pixstay.schemas.payment import BookingPaymentSummary, TransactionSummary
from pixstay.schemas.response import ErrorResponse
from pixstay.services.payment_store import PaymentStore

router = APIRouter()


@router.get(
    "/{booking_id}/payment",
    response_model=BookingPaymentSummary,
    responses={404: {"model": ErrorResponse}}
)
async def get_booking_payment(
    booking_id: str,
    store: PaymentStore = Depends(get_payment_store)
):
    """Payment status of a booking and its transaction attempts"""
    booking = await store.get_booking(booking_id)
    if booking is None:
        raise NotFoundError("Booking", booking_id)

    transactions = await store.list_transactions(booking_id)
    return BookingPaymentSummary(
        booking_id=booking.id,
        payment_status=booking.payment_status.value,
        paid_at=booking.paid_at,
        transactions=[TransactionSummary.model_validate(tx) for tx in transactions],
    )
