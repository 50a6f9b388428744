"""
Test settings parsing and the injected gateway configuration
"""

import pytest
from pydantic import ValidationError

from pixstay.config import DEFAULT_PAID_STATUSES, Settings
from pixstay.services.hurapayments import HuraPaymentsConfig


def test_paid_statuses_from_comma_list():
    settings = Settings(HURAPAYMENTS_PAID_STATUSES="Paid, pago ,,APPROVED")
    assert settings.HURAPAYMENTS_PAID_STATUSES == ["paid", "pago", "approved"]


def test_default_postback_url():
    settings = Settings(PUBLIC_BASE_URL="https://stay.example.com/")
    assert settings.postback_url == "https://stay.example.com/api/v1/payments/hurapayments/postback"


def test_postback_url_override():
    settings = Settings(HURAPAYMENTS_POSTBACK_URL="https://hooks.example.com/hura")
    assert settings.postback_url == "https://hooks.example.com/hura"


def test_postgres_url_uses_asyncpg():
    settings = Settings(DATABASE_URL="postgresql://u:p@db/pixstay")
    assert settings.DATABASE_URL == "postgresql+asyncpg://u:p@db/pixstay"


def test_config_from_settings():
    settings = Settings(
        HURAPAYMENTS_PUBLIC_KEY="pk",
        HURAPAYMENTS_SECRET_KEY="sk",
        HURAPAYMENTS_PAID_STATUSES="paid,Settled",
    )
    config = HuraPaymentsConfig.from_settings(settings)
    assert config.has_credentials
    assert config.provider == "hurapayments"
    assert config.paid_statuses == frozenset({"paid", "settled"})


def test_missing_credentials():
    config = HuraPaymentsConfig(public_key="pk", secret_key="", postback_url="http://x")
    assert not config.has_credentials


def test_empty_paid_statuses_rejected():
    with pytest.raises(ValidationError):
        Settings(HURAPAYMENTS_PAID_STATUSES=" , ")


def test_default_paid_statuses_shared():
    settings = Settings()
    config = HuraPaymentsConfig(public_key="pk", secret_key="sk", postback_url="http://x")
    assert settings.HURAPAYMENTS_PAID_STATUSES == list(DEFAULT_PAID_STATUSES)
    assert config.paid_statuses == frozenset(DEFAULT_PAID_STATUSES)
    assert HuraPaymentsConfig.from_settings(settings).paid_statuses == config.paid_statuses
