"""
HuraPayments gateway client
Creates PIX transactions over the gateway's REST API
"""

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Optional

import httpx

from pixstay.config import DEFAULT_PAID_STATUSES
from pixstay.core.metrics import GATEWAY_LATENCY
from pixstay.models.payment_transaction import HURAPAYMENTS_PROVIDER

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HuraPaymentsConfig:
    """Credentials and endpoints injected into the payment handlers"""
    public_key: str
    secret_key: str
    postback_url: str
    api_url: str = "https://api.hurapayments.com.br"
    timeout_seconds: float = 15.0
    paid_statuses: FrozenSet[str] = field(default=frozenset(DEFAULT_PAID_STATUSES))
    provider: str = HURAPAYMENTS_PROVIDER

    @classmethod
    def from_settings(cls, settings) -> "HuraPaymentsConfig":
        return cls(
            public_key=settings.HURAPAYMENTS_PUBLIC_KEY,
            secret_key=settings.HURAPAYMENTS_SECRET_KEY,
            postback_url=settings.postback_url,
            api_url=settings.HURAPAYMENTS_API_URL,
            timeout_seconds=settings.HURAPAYMENTS_TIMEOUT_SECONDS,
            paid_statuses=normalize_statuses(settings.HURAPAYMENTS_PAID_STATUSES),
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.public_key and self.secret_key)


def normalize_statuses(statuses: Iterable[str]) -> FrozenSet[str]:
    return frozenset(s.strip().lower() for s in statuses if s and s.strip())


def parse_body(text: str) -> Any:
    """Decode a gateway body, keeping non-JSON text as {"raw": text}"""
    if not text:
        return {}
    try:
        return json.loads(text)
    except ValueError:
        return {"raw": text}


@dataclass
class GatewayResponse:
    status_code: int
    body: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class HuraPaymentsClient:
    """Thin async client for the create-transaction endpoint"""

    CREATE_TRANSACTION_PATH = "/v1/payment-transaction/create"

    def __init__(
        self,
        config: HuraPaymentsConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.config = config
        self._transport = transport

    async def create_transaction(self, payload: Dict[str, Any]) -> GatewayResponse:
        """
        POST the transaction payload with HTTP Basic credentials.

        Raises httpx.TimeoutException when the gateway does not answer within
        the configured timeout and httpx.TransportError when it is unreachable.
        """
        started = time.perf_counter()
        async with httpx.AsyncClient(
            base_url=self.config.api_url,
            auth=httpx.BasicAuth(self.config.public_key, self.config.secret_key),
            timeout=self.config.timeout_seconds,
            transport=self._transport,
        ) as client:
            response = await client.post(
                self.CREATE_TRANSACTION_PATH,
                json=payload,
                headers={"accept": "application/json"},
            )

        GATEWAY_LATENCY.labels(provider=self.config.provider).observe(time.perf_counter() - started)
        logger.debug(f"Gateway answered {response.status_code} for create-transaction")
        return GatewayResponse(status_code=response.status_code, body=parse_body(response.text))
