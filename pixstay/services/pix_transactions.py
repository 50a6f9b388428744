"""
PIX transaction initiation
Validates a booking payment request, creates the transaction on the gateway
and records every attempt
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import ValidationError as PydanticValidationError

from pixstay.core.exceptions import (
    ConfigurationError,
    ConflictError,
    GatewayRejectionError,
    GatewayTimeoutError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from pixstay.core.metrics import PIX_TRANSACTIONS
from pixstay.schemas.payment import PixMaterial, PixTransactionCreate, PixTransactionResponse
from pixstay.services.extraction import (
    COPY_PASTE_KEYS,
    QR_CODE_KEYS,
    TRANSACTION_ID_KEYS,
    as_identifier,
    as_text,
    first_present,
    nested_then_flat,
)
from pixstay.services.hurapayments import GatewayResponse, HuraPaymentsClient, HuraPaymentsConfig
from pixstay.services.payment_store import PaymentStore

logger = logging.getLogger(__name__)

PIX_PAYMENT_METHOD = "pix"
DEFAULT_CREATED_STATUS = "created"
FAILED_STATUS = "failed"
TIMEOUT_STATUS = "timeout"


@dataclass
class GatewayItem:
    title: str
    quantity: int
    unit_price: int

    def to_payload(self) -> Dict[str, Any]:
        # Both spellings: the gateway has accepted each at different times
        return {
            "title": self.title,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "unit_price": self.unit_price,
        }


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def fallback_unit_price(amount_cents: int, total_quantity: int) -> int:
    return max(1, amount_cents // max(total_quantity, 1))


def normalize_items(items: Sequence[Any], amount_cents: int) -> List[GatewayItem]:
    """
    Make sure every item carries a positive integer unit price.

    When a unit price is unusable or the items do not add up to the charged
    amount, every item gets the same floor(amount / total quantity) price.
    """
    total_quantity = sum(item.quantity for item in items)
    consistent = all(_is_positive_int(item.unit_price) for item in items) and (
        sum(item.unit_price * item.quantity for item in items) == amount_cents
    )
    if consistent:
        return [GatewayItem(item.title, item.quantity, item.unit_price) for item in items]

    unit_price = fallback_unit_price(amount_cents, total_quantity)
    logger.info(f"Line items do not match {amount_cents} cents, using uniform unit price {unit_price}")
    return [GatewayItem(item.title, item.quantity, unit_price) for item in items]


def _describe_error(error: Dict[str, Any]) -> str:
    field = ""
    for part in error.get("loc", ()):
        if isinstance(part, int):
            field += f"[{part}]"
        else:
            field += f".{part}" if field else str(part)
    message = str(error.get("msg", "is invalid")).removeprefix("Value error, ")
    return f"{field}: {message}" if field else message


def parse_request(body: Any) -> PixTransactionCreate:
    """Validate a raw request body, raising a 400-mapped ValidationError"""
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return PixTransactionCreate.model_validate(body)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        raise ValidationError(_describe_error(first), field=field or None) from e


@dataclass
class ExtractedTransaction:
    provider_transaction_id: Optional[str]
    status: str
    qr_code: Optional[str]
    copy_paste: Optional[str]


def extract_transaction(body: Any) -> ExtractedTransaction:
    """Read the created transaction from a nested (data.*) or flat response"""
    provider_transaction_id = as_identifier(first_present(body, nested_then_flat(TRANSACTION_ID_KEYS)))
    status = as_text(first_present(body, nested_then_flat(("status",)))) or DEFAULT_CREATED_STATUS

    pix = first_present(body, nested_then_flat(("pix",)))
    if not isinstance(pix, dict):
        pix = {}
    qr_code = as_text(first_present(pix, [(key,) for key in QR_CODE_KEYS]))
    # For this gateway the copy-paste code is usually the same EMV payload
    copy_paste = as_text(first_present(pix, [(key,) for key in COPY_PASTE_KEYS])) or qr_code

    return ExtractedTransaction(provider_transaction_id, status, qr_code, copy_paste)


class PixTransactionInitiator:
    """Creates PIX transactions for bookings"""

    def __init__(self, config: HuraPaymentsConfig, gateway: HuraPaymentsClient, store: PaymentStore):
        self.config = config
        self.gateway = gateway
        self.store = store

    def build_payload(
        self,
        request: PixTransactionCreate,
        items: List[GatewayItem],
        client_ip: Optional[str] = None
    ) -> Dict[str, Any]:
        payload = {
            "amount": request.amount_cents,
            "payment_method": PIX_PAYMENT_METHOD,
            "postback_url": self.config.postback_url,
            "customer": {
                "name": request.guest.name,
                "email": request.guest.email,
                "phone": request.guest.phone,
                "document": {"type": "cpf", "number": request.guest.cpf_digits},
            },
            "items": [item.to_payload() for item in items],
            "metadata": {**(request.metadata or {}), "booking_id": request.booking_id},
        }
        if client_ip:
            payload["ip"] = client_ip
        return payload

    async def create(
        self,
        request: PixTransactionCreate,
        client_ip: Optional[str] = None
    ) -> PixTransactionResponse:
        if not self.config.has_credentials:
            logger.error("Missing HuraPayments credentials")
            raise ConfigurationError("Payment credentials are not configured")

        booking = await self.store.get_booking(request.booking_id)
        if booking is None:
            raise NotFoundError("Booking", request.booking_id)
        if booking.is_paid:
            raise ConflictError("Booking is already paid", details={"booking_id": request.booking_id})

        items = normalize_items(request.items, request.amount_cents)
        payload = self.build_payload(request, items, client_ip)

        logger.info(
            "Creating PIX transaction",
            extra={"booking_id": request.booking_id, "amount_cents": request.amount_cents}
        )
        try:
            response = await self.gateway.create_transaction(payload)
        except httpx.TimeoutException:
            logger.error("Gateway timed out creating transaction", extra={"booking_id": request.booking_id})
            PIX_TRANSACTIONS.labels(outcome="timeout").inc()
            # Outcome unknown: a postback may still confirm it, so the booking stays as is
            await self._record_attempt(request, status=TIMEOUT_STATUS, raw={"error": "gateway timeout"})
            raise GatewayTimeoutError(self.config.provider, self.config.timeout_seconds)
        except httpx.TransportError as e:
            logger.error(f"Gateway unreachable: {e}", extra={"booking_id": request.booking_id})
            PIX_TRANSACTIONS.labels(outcome="unreachable").inc()
            raw = {"error": str(e) or type(e).__name__}
            await self._record_failure(request, raw)
            raise GatewayRejectionError(details=raw)

        if not response.ok:
            return await self._handle_rejection(request, response)

        extracted = extract_transaction(response.body)
        PIX_TRANSACTIONS.labels(outcome="created").inc()
        await self._record_attempt(
            request,
            status=extracted.status,
            raw=response.body,
            provider_transaction_id=extracted.provider_transaction_id,
            pix_qr_code=extracted.qr_code,
            pix_copy_paste=extracted.copy_paste,
        )

        return PixTransactionResponse(
            provider=self.config.provider,
            provider_transaction_id=extracted.provider_transaction_id,
            status=extracted.status,
            pix=PixMaterial(qr_code=extracted.qr_code, copy_paste=extracted.copy_paste),
            raw=response.body,
        )

    async def _handle_rejection(self, request: PixTransactionCreate, response: GatewayResponse):
        logger.error(
            f"Gateway rejected transaction with HTTP {response.status_code}",
            extra={"booking_id": request.booking_id}
        )
        PIX_TRANSACTIONS.labels(outcome="rejected").inc()
        await self._record_failure(request, response.body)
        details = response.body if isinstance(response.body, dict) else {"raw": response.body}
        raise GatewayRejectionError(details=details)

    async def _record_failure(self, request: PixTransactionCreate, raw: Any) -> None:
        await self._record_attempt(request, status=FAILED_STATUS, raw=raw)
        try:
            await self.store.mark_booking_failed(request.booking_id)
        except PersistenceError:
            logger.error("Could not mark booking as payment_failed", extra={"booking_id": request.booking_id})

    async def _record_attempt(self, request: PixTransactionCreate, **fields) -> None:
        # Displaying the PIX code must not depend on the audit row being saved
        try:
            await self.store.add_transaction(
                booking_id=request.booking_id,
                provider=self.config.provider,
                amount_cents=request.amount_cents,
                **fields
            )
        except PersistenceError:
            logger.error("Failed to save payment transaction", extra={"booking_id": request.booking_id})
