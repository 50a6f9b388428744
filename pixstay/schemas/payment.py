"""
Payment schemas for request/response models
"""

import re
from typing import Optional, Dict, Any, List
from datetime import datetime
from pydantic import Field, field_validator

from pixstay.schemas.base import CamelSchema

CPF_LENGTH = 11
_NON_DIGITS = re.compile(r"\D+")


def only_digits(value: str) -> str:
    return _NON_DIGITS.sub("", value)


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("must be a non-empty string")
    return value


class GuestInfo(CamelSchema):
    name: str
    email: str
    phone: str
    cpf: str

    @field_validator("name", "email", "phone")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _require_text(v)

    @field_validator("cpf")
    @classmethod
    def validate_cpf(cls, v: str) -> str:
        if len(only_digits(v)) != CPF_LENGTH:
            raise ValueError(f"CPF must have {CPF_LENGTH} digits")
        return v

    @property
    def cpf_digits(self) -> str:
        return only_digits(self.cpf)


class LineItem(CamelSchema):
    title: str
    quantity: int = Field(..., gt=0, strict=True)
    unit_price: int = Field(..., gt=0, strict=True)

    @field_validator("title")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _require_text(v)


class PixTransactionCreate(CamelSchema):
    booking_id: str
    amount_cents: int = Field(..., gt=0, strict=True)
    guest: GuestInfo
    items: List[LineItem] = Field(..., min_length=1)
    metadata: Optional[Dict[str, Any]] = None

    @field_validator("booking_id")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _require_text(v)


class PixMaterial(CamelSchema):
    qr_code: Optional[str] = None
    copy_paste: Optional[str] = None


class PixTransactionResponse(CamelSchema):
    ok: bool = True
    provider: str
    provider_transaction_id: Optional[str] = None
    status: str
    pix: PixMaterial
    raw: Any = None


class PostbackAck(CamelSchema):
    ok: bool = True
    updated: Optional[str] = None


class TransactionSummary(CamelSchema):
    id: str
    provider: str
    provider_transaction_id: Optional[str] = None
    amount_cents: int
    status: str
    created_at: Optional[datetime] = None


class BookingPaymentSummary(CamelSchema):
    booking_id: str
    payment_status: str
    paid_at: Optional[datetime] = None
    transactions: List[TransactionSummary] = []
