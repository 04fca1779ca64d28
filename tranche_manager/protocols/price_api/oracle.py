"""
HTTP price oracle

Fetches a JSON price quote (token1 per token0, human units) and converts
it to a venue tick. Failures are never retried: an oracle error aborts
the calling manager operation.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

import httpx

from ..base import PriceOracle
from ...config import PriceApiConfig, config as global_config
from ...errors import ConfigurationError, OracleUnavailable
from ...math.tick_math import price_to_tick
from ...types import Token

logger = logging.getLogger(__name__)


class PriceApiOracle(PriceOracle):
    """
    Price oracle backed by a JSON HTTP endpoint

    Usage:
        oracle = PriceApiOracle(weth, usdc, url="https://prices.example/weth-usdc")
        tick = oracle.target_tick()

    The price is read from `price_field`, which may be a dotted path into
    nested objects (e.g. "data.price").
    """

    name = "price-api"

    def __init__(
        self,
        token0: Token,
        token1: Token,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        price_field: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        price_api_config: Optional[PriceApiConfig] = None,
    ):
        """
        Initialize price API oracle

        Args:
            token0: Pool token0
            token1: Pool token1
            url: Endpoint URL (or set PRICE_API_URL env var)
            api_key: Optional bearer token (or set PRICE_API_KEY env var)
            timeout: Request timeout in seconds
            price_field: JSON field holding the price
            client: Pre-built httpx client
        """
        cfg = price_api_config or global_config.price_api
        self.token0 = token0
        self.token1 = token1
        self._url = url or cfg.url
        self._api_key = api_key or cfg.api_key
        self._timeout = timeout or cfg.timeout
        self._price_field = price_field or cfg.price_field
        self._client = client

        if not self._url:
            raise ConfigurationError.missing("PRICE_API_URL")

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client with auth headers"""
        if self._client is None:
            headers = {
                "Accept": "application/json",
            }
            if self._api_key:
                headers["Authorization"] = f"Bearer {self._api_key}"

            self._client = httpx.Client(
                timeout=self._timeout,
                headers=headers,
            )
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def _extract_price(self, data: Dict[str, Any]) -> Decimal:
        value: Any = data
        for key in self._price_field.split("."):
            if not isinstance(value, dict) or key not in value:
                raise OracleUnavailable.invalid_response(self.name, f"missing field '{self._price_field}'")
            value = value[key]

        try:
            price = Decimal(str(value))
        except InvalidOperation:
            raise OracleUnavailable.invalid_response(self.name, f"price is not a number: {value!r}")
        if not price.is_finite() or price <= 0:
            raise OracleUnavailable.invalid_response(self.name, f"price must be positive, got {price}")
        return price

    def get_price(self) -> Decimal:
        """
        Fetch the current price

        Raises:
            OracleUnavailable: On HTTP failure or an unusable body
        """
        client = self._get_client()
        try:
            response = client.get(self._url)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise OracleUnavailable.unreachable(
                self.name, RuntimeError(f"HTTP {e.response.status_code}")
            ) from e
        except httpx.TimeoutException as e:
            raise OracleUnavailable.unreachable(self.name, e) from e
        except httpx.RequestError as e:
            raise OracleUnavailable.unreachable(self.name, e) from e
        except ValueError as e:
            raise OracleUnavailable.invalid_response(self.name, f"body is not JSON: {e}") from e

        if not isinstance(data, dict):
            raise OracleUnavailable.invalid_response(self.name, "body is not a JSON object")
        return self._extract_price(data)

    def target_tick(self) -> int:
        price = self.get_price()
        tick = price_to_tick(price, self.token0.decimals, self.token1.decimals)
        logger.debug(f"{self.token0}/{self.token1} price {price} -> tick {tick}")
        return tick
