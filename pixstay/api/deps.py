"""
FastAPI dependencies wiring configuration, gateway and persistence into the handlers
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pixstay.config import settings
from pixstay.core.database import get_session
from pixstay.services.hurapayments import HuraPaymentsClient, HuraPaymentsConfig
from pixstay.services.payment_store import PaymentStore
from pixstay.services.pix_transactions import PixTransactionInitiator
from pixstay.services.postbacks import PostbackReceiver


def get_payment_config() -> HuraPaymentsConfig:
    return HuraPaymentsConfig.from_settings(settings)


def get_gateway_client(
    config: HuraPaymentsConfig = Depends(get_payment_config)
) -> HuraPaymentsClient:
    return HuraPaymentsClient(config)


def get_payment_store(db: AsyncSession = Depends(get_session)) -> PaymentStore:
    return PaymentStore(db)


def get_pix_initiator(
    config: HuraPaymentsConfig = Depends(get_payment_config),
    gateway: HuraPaymentsClient = Depends(get_gateway_client),
    store: PaymentStore = Depends(get_payment_store)
) -> PixTransactionInitiator:
    return PixTransactionInitiator(config, gateway, store)


def get_postback_receiver(
    config: HuraPaymentsConfig = Depends(get_payment_config),
    store: PaymentStore = Depends(get_payment_store)
) -> PostbackReceiver:
    return PostbackReceiver(config, store)
