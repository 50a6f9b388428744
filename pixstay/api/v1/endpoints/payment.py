"""
Payment API Endpoints
PIX transaction creation and HuraPayments postback
"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request

from pixstay.api.deps import get_pix_initiator, get_postback_receiver
from pixstay.core.exceptions import InternalError, PixStayException, ValidationError
from pixstay.schemas.payment import PixTransactionResponse, PostbackAck
from pixstay.schemas.response import ErrorResponse
from pixstay.services.pix_transactions import PixTransactionInitiator, parse_request
from pixstay.services.postbacks import PostbackReceiver, parse_postback

logger = logging.getLogger(__name__)
router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
}


def client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.headers.get("cf-connecting-ip")


@router.post(
    "/hurapayments/transactions",
    response_model=PixTransactionResponse,
    responses=ERROR_RESPONSES
)
async def create_pix_transaction(
    request: Request,
    initiator: PixTransactionInitiator = Depends(get_pix_initiator)
):
    """Create a PIX transaction for a booking and return its QR / copy-paste code"""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Request body must be valid JSON")

    try:
        return await initiator.create(parse_request(body), client_ip=client_ip(request))
    except PixStayException:
        raise
    except Exception:
        logger.exception("Unexpected error creating PIX transaction")
        raise InternalError()


@router.post(
    "/hurapayments/postback",
    response_model=PostbackAck,
    response_model_exclude_none=True,
    responses={500: {"model": ErrorResponse}}
)
async def receive_postback(
    request: Request,
    receiver: PostbackReceiver = Depends(get_postback_receiver)
):
    """Gateway webhook: reconcile a transaction status change"""
    try:
        payload = parse_postback((await request.body()).decode("utf-8", errors="replace"))
        return await receiver.handle(payload)
    except PixStayException:
        raise
    except Exception:
        logger.exception("Unexpected error handling postback")
        raise InternalError()
