"""
Test postback reconciliation of transactions and bookings
"""

from dataclasses import replace
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from pixstay.core.exceptions import PersistenceError
from pixstay.models.booking import BookingPaymentStatus
from pixstay.services.postbacks import PostbackReceiver


@pytest_asyncio.fixture
async def receiver(payment_config, store):
    return PostbackReceiver(payment_config, store)


@pytest_asyncio.fixture
async def pending_transaction(store, test_booking):
    return await store.add_transaction(
        booking_id=test_booking.id,
        provider="hurapayments",
        provider_transaction_id="tx1",
        amount_cents=45000,
        status="waiting_payment",
        raw={"id": "tx1"},
    )


class TestBookingConfirmation:

    @pytest.mark.asyncio
    async def test_approved_marks_booking_paid(self, receiver, db_session, test_booking, pending_transaction):
        payload = {"id": "tx1", "status": "APPROVED", "metadata": {"booking_id": test_booking.id}}

        ack = await receiver.handle(payload)

        assert ack.ok is True
        assert ack.updated == "booking_paid"
        await db_session.refresh(test_booking)
        await db_session.refresh(pending_transaction)
        assert test_booking.payment_status == BookingPaymentStatus.PAID
        assert test_booking.paid_at is not None
        assert pending_transaction.status == "approved"
        assert pending_transaction.raw == payload

    @pytest.mark.parametrize("status", ["paid", "Approved", " CONFIRMED ", "success", "completed"])
    @pytest.mark.asyncio
    async def test_paid_vocabulary(self, receiver, db_session, test_booking, status):
        ack = await receiver.handle({"status": status, "data": {"metadata": {"bookingId": test_booking.id}}})
        assert ack.updated == "booking_paid"
        await db_session.refresh(test_booking)
        assert test_booking.payment_status == BookingPaymentStatus.PAID

    @pytest.mark.asyncio
    async def test_redelivery_is_idempotent(self, receiver, db_session, test_booking, pending_transaction):
        payload = {"id": "tx1", "status": "paid", "metadata": {"booking_id": test_booking.id}}

        first = await receiver.handle(payload)
        await db_session.refresh(test_booking)
        paid_at = test_booking.paid_at

        second = await receiver.handle(payload)
        await db_session.refresh(test_booking)

        assert first.updated == second.updated == "booking_paid"
        assert test_booking.payment_status == BookingPaymentStatus.PAID
        assert test_booking.paid_at == paid_at

    @pytest.mark.asyncio
    async def test_failed_booking_can_still_be_paid(self, receiver, db_session, test_booking, store):
        await store.mark_booking_failed(test_booking.id)

        await receiver.handle({"status": "paid", "metadata": {"booking_id": test_booking.id}})

        await db_session.refresh(test_booking)
        assert test_booking.payment_status == BookingPaymentStatus.PAID

    @pytest.mark.asyncio
    async def test_paid_statuses_are_configurable(self, payment_config, store, db_session, test_booking):
        receiver = PostbackReceiver(replace(payment_config, paid_statuses=frozenset({"pago"})), store)

        ack = await receiver.handle({"status": "approved", "metadata": {"booking_id": test_booking.id}})
        assert ack.updated is None

        ack = await receiver.handle({"status": "PAGO", "metadata": {"booking_id": test_booking.id}})
        assert ack.updated == "booking_paid"

    @pytest.mark.asyncio
    async def test_unknown_booking_is_acknowledged(self, receiver):
        ack = await receiver.handle({"status": "paid", "metadata": {"booking_id": "ghost"}})
        assert ack.ok is True
        assert ack.updated is None

    @pytest.mark.asyncio
    async def test_booking_update_failure_is_fatal(self, payment_config, store, test_booking):
        store.mark_booking_paid = AsyncMock(side_effect=PersistenceError(operation="mark_booking_paid"))
        receiver = PostbackReceiver(payment_config, store)

        with pytest.raises(PersistenceError) as exc_info:
            await receiver.handle({"status": "paid", "metadata": {"booking_id": test_booking.id}})
        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Failed to confirm booking"


class TestTransactionOnlyUpdates:

    @pytest.mark.asyncio
    async def test_without_booking_id_only_transaction_changes(self, receiver, db_session, test_booking, pending_transaction):
        ack = await receiver.handle({"id": "tx1", "status": "paid"})

        assert ack.ok is True
        assert ack.updated is None
        await db_session.refresh(pending_transaction)
        await db_session.refresh(test_booking)
        assert pending_transaction.status == "paid"
        assert test_booking.payment_status == BookingPaymentStatus.PENDING

    @pytest.mark.asyncio
    async def test_not_paid_status_leaves_booking(self, receiver, db_session, test_booking, pending_transaction):
        ack = await receiver.handle({"id": "tx1", "status": "Refused", "metadata": {"booking_id": test_booking.id}})

        assert ack.updated is None
        await db_session.refresh(pending_transaction)
        await db_session.refresh(test_booking)
        assert pending_transaction.status == "refused"
        assert test_booking.payment_status == BookingPaymentStatus.PENDING

    @pytest.mark.asyncio
    async def test_missing_status_is_recorded_as_updated(self, receiver, db_session, pending_transaction):
        await receiver.handle({"data": {"id": "tx1"}})
        await db_session.refresh(pending_transaction)
        assert pending_transaction.status == "updated"

    @pytest.mark.asyncio
    async def test_unknown_transaction_is_not_fatal(self, receiver):
        ack = await receiver.handle({"id": "nope", "status": "paid"})
        assert ack.ok is True

    @pytest.mark.asyncio
    async def test_transaction_update_failure_is_not_fatal(self, payment_config, store, db_session, test_booking):
        store.update_transaction_status = AsyncMock(side_effect=PersistenceError(operation="update_transaction_status"))
        receiver = PostbackReceiver(payment_config, store)

        ack = await receiver.handle({"id": "tx1", "status": "paid", "metadata": {"booking_id": test_booking.id}})

        assert ack.updated == "booking_paid"
        await db_session.refresh(test_booking)
        assert test_booking.payment_status == BookingPaymentStatus.PAID
