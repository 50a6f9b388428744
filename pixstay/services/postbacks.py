"""
Gateway postback (webhook) reconciliation
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pixstay.core.exceptions import PersistenceError
from pixstay.core.metrics import PAYMENT_POSTBACKS
from pixstay.schemas.payment import PostbackAck
from pixstay.services.extraction import (
    BOOKING_ID_KEYS,
    TRANSACTION_ID_KEYS,
    as_identifier,
    first_present,
    flat_then_nested,
    normalize_status,
)
from pixstay.services.hurapayments import HuraPaymentsConfig, parse_body
from pixstay.services.payment_store import PaidUpdate, PaymentStore

logger = logging.getLogger(__name__)

BOOKING_PAID = "booking_paid"
UPDATED_STATUS = "updated"


@dataclass
class PostbackNotice:
    provider_transaction_id: Optional[str]
    booking_id: Optional[str]
    status: str


def parse_postback(text: str) -> Dict[str, Any]:
    payload = parse_body(text)
    if not isinstance(payload, dict):
        return {"raw": text}
    return payload


def extract_notice(payload: Dict[str, Any]) -> PostbackNotice:
    """Top-level fields first, then the data wrapper"""
    provider_transaction_id = as_identifier(first_present(payload, flat_then_nested(TRANSACTION_ID_KEYS)))
    metadata = first_present(payload, flat_then_nested(("metadata",)))
    if not isinstance(metadata, dict):
        metadata = {}
    booking_id = as_identifier(first_present(metadata, [(key,) for key in BOOKING_ID_KEYS]))
    status = normalize_status(first_present(payload, flat_then_nested(("status",))))
    return PostbackNotice(provider_transaction_id, booking_id, status)


class PostbackReceiver:
    """Applies gateway notifications to transactions and bookings"""

    def __init__(self, config: HuraPaymentsConfig, store: PaymentStore):
        self.config = config
        self.store = store

    def is_paid(self, status: str) -> bool:
        return status in self.config.paid_statuses

    async def handle(self, payload: Dict[str, Any]) -> PostbackAck:
        notice = extract_notice(payload)
        paid = self.is_paid(notice.status)
        PAYMENT_POSTBACKS.labels(classification="paid" if paid else "not_paid").inc()

        logger.info(
            "Postback received",
            extra={
                "provider_transaction_id": notice.provider_transaction_id,
                "booking_id": notice.booking_id,
                "status": notice.status,
            }
        )

        if notice.provider_transaction_id:
            await self._update_transaction(notice, payload)

        if notice.booking_id and paid:
            return await self._confirm_booking(notice.booking_id)

        return PostbackAck()

    async def _update_transaction(self, notice: PostbackNotice, payload: Dict[str, Any]) -> None:
        try:
            updated = await self.store.update_transaction_status(
                self.config.provider,
                notice.provider_transaction_id,
                notice.status or UPDATED_STATUS,
                payload,
            )
        except PersistenceError:
            logger.error(
                "Failed to update payment transaction",
                extra={"provider_transaction_id": notice.provider_transaction_id}
            )
            return
        if not updated:
            logger.warning(
                "No payment transaction matches postback",
                extra={"provider_transaction_id": notice.provider_transaction_id}
            )

    async def _confirm_booking(self, booking_id: str) -> PostbackAck:
        try:
            result = await self.store.mark_booking_paid(booking_id, datetime.now(timezone.utc))
        except PersistenceError:
            logger.error("Failed to update booking", extra={"booking_id": booking_id})
            # 500 makes the gateway re-deliver the notification
            raise PersistenceError("Failed to confirm booking", operation="mark_booking_paid")

        if result is PaidUpdate.NOT_FOUND:
            logger.warning("Postback references unknown booking", extra={"booking_id": booking_id})
            return PostbackAck()
        if result is PaidUpdate.ALREADY_PAID:
            logger.info("Booking already paid, postback ignored", extra={"booking_id": booking_id})
        return PostbackAck(updated=BOOKING_PAID)
