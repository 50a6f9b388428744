"""
Persistence for bookings and payment transactions
"""

import enum
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pixstay.core.exceptions import PersistenceError
from pixstay.models.booking import Booking, BookingPaymentStatus
from pixstay.models.payment_transaction import PaymentTransaction

logger = logging.getLogger(__name__)


class PaidUpdate(str, enum.Enum):
    MARKED = "marked"
    ALREADY_PAID = "already_paid"
    NOT_FOUND = "not_found"


class PaymentStore:
    """
    Data access used by the payment handlers.
    Every write commits immediately so a failed write never rolls back an
    earlier one made during the same request.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    @asynccontextmanager
    async def _guard(self, operation: str):
        try:
            yield
        except SQLAlchemyError as e:
            logger.error(f"{operation} failed: {type(e).__name__}: {e}")
            await self.session.rollback()
            raise PersistenceError(operation=operation) from e

    async def get_booking(self, booking_id: str) -> Optional[Booking]:
        async with self._guard("get_booking"):
            return await self.session.get(Booking, booking_id)

    async def add_transaction(
        self,
        *,
        booking_id: str,
        provider: str,
        amount_cents: int,
        status: str,
        raw: Any,
        provider_transaction_id: Optional[str] = None,
        pix_qr_code: Optional[str] = None,
        pix_copy_paste: Optional[str] = None
    ) -> PaymentTransaction:
        transaction = PaymentTransaction(
            booking_id=booking_id,
            provider=provider,
            provider_transaction_id=provider_transaction_id,
            amount_cents=amount_cents,
            status=status,
            pix_qr_code=pix_qr_code,
            pix_copy_paste=pix_copy_paste,
            raw=raw if raw is not None else {},
        )
        async with self._guard("add_transaction"):
            self.session.add(transaction)
            await self.session.commit()
        return transaction

    async def update_transaction_status(
        self,
        provider: str,
        provider_transaction_id: str,
        status: str,
        raw: Any
    ) -> int:
        """Returns the number of transactions updated (0 when unknown)"""
        stmt = (
            update(PaymentTransaction)
            .where(
                PaymentTransaction.provider == provider,
                PaymentTransaction.provider_transaction_id == provider_transaction_id,
            )
            .values(status=status, raw=raw)
        )
        async with self._guard("update_transaction_status"):
            result = await self.session.execute(stmt)
            await self.session.commit()
        return result.rowcount

    async def mark_booking_failed(self, booking_id: str) -> bool:
        """pending -> payment_failed; a paid booking is never demoted"""
        stmt = (
            update(Booking)
            .where(
                Booking.id == booking_id,
                Booking.payment_status == BookingPaymentStatus.PENDING,
            )
            .values(payment_status=BookingPaymentStatus.PAYMENT_FAILED)
        )
        async with self._guard("mark_booking_failed"):
            result = await self.session.execute(stmt)
            await self.session.commit()
        return result.rowcount > 0

    async def mark_booking_paid(self, booking_id: str, paid_at: datetime) -> PaidUpdate:
        stmt = (
            update(Booking)
            .where(
                Booking.id == booking_id,
                Booking.payment_status != BookingPaymentStatus.PAID,
            )
            .values(payment_status=BookingPaymentStatus.PAID, paid_at=paid_at)
        )
        async with self._guard("mark_booking_paid"):
            result = await self.session.execute(stmt)
            await self.session.commit()
            if result.rowcount:
                return PaidUpdate.MARKED
            exists = await self.session.scalar(select(Booking.id).where(Booking.id == booking_id))
        return PaidUpdate.ALREADY_PAID if exists else PaidUpdate.NOT_FOUND

    async def list_transactions(self, booking_id: str) -> List[PaymentTransaction]:
        stmt = (
            select(PaymentTransaction)
            .where(PaymentTransaction.booking_id == booking_id)
            .order_by(PaymentTransaction.created_at)
        )
        async with self._guard("list_transactions"):
            result = await self.session.execute(stmt)
        return list(result.scalars().all())
