"""Shop API client - httpx with bearer-token auth.

Covers the two remote calls the storefront needs: catalog search and the
per-item purchase used by checkout. Token storage belongs to the host; the
client only keeps the current token and drops it when the server answers 401.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from storefront.cart import Product
from storefront.config import get_settings
from storefront.errors import (
    ERROR_NETWORK,
    ERROR_PURCHASE_FAILED,
    AuthRequiredError,
    CatalogError,
    PurchaseError,
)
from storefront.logging import get_logger, sanitize_id_for_logging, sanitize_string_for_logging

logger = get_logger(__name__)


def _server_message(response: httpx.Response) -> Optional[str]:
    """Pull the ``message`` field out of an error body, if any."""
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return None


class StorefrontAPI:
    """Async client for the shop API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.api_url).rstrip("/")
        self.timeout = timeout or settings.api_timeout
        self._token = token
        self._transport = transport

        # HTTP client (lazy init)
        self._http_client: httpx.AsyncClient | None = None

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy creation of shared httpx client with timeouts."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._http_client

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "StorefrontAPI":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ---- auth ----

    def set_auth_token(self, token: Optional[str]) -> None:
        """Set (or clear, with None) the bearer token sent on every request."""
        self._token = token or None

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    def _headers(self) -> Dict[str, str]:
        if self._token:
            return {"Authorization": f"Bearer {self._token}"}
        return {}

    def _handle_unauthorized(self) -> None:
        logger.info("Session token rejected by server, clearing it")
        self._token = None

    # ---- catalog ----

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        client = await self._get_http_client()
        response = await client.get(path, params=params, headers=self._headers())
        response.raise_for_status()
        return response.json()

    async def search_products(
        self,
        q: Optional[str] = None,
        category: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> List[Product]:
        """
        Search the catalog. Empty filters are not sent.

        Raises:
            CatalogError: listing failed after retries or returned garbage
        """
        params: Dict[str, Any] = {}
        if q:
            params["q"] = q
        if category:
            params["category"] = category
        if min_price is not None:
            params["minPrice"] = min_price
        if max_price is not None:
            params["maxPrice"] = max_price

        try:
            data = await self._get_json("/sweets/search", params=params)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 401:
                self._handle_unauthorized()
            message = _server_message(e.response) or f"HTTP {e.response.status_code}"
            logger.warning(f"Catalog search failed: {sanitize_string_for_logging(message)}")
            raise CatalogError(message) from e
        except httpx.RequestError as e:
            logger.warning(f"Catalog network error: {e}")
            raise CatalogError(ERROR_NETWORK) from e
        except ValueError as e:
            raise CatalogError("Invalid catalog response") from e

        if not isinstance(data, list):
            raise CatalogError("Invalid catalog response")

        products: List[Product] = []
        for raw in data:
            try:
                products.append(Product.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Skipping malformed product: {e.error_count()} error(s)")
        return products

    # ---- purchase ----

    async def purchase(self, product_id: str, quantity: int) -> Dict[str, Any]:
        """
        Purchase ``quantity`` units of one product.

        Not retried: a repeated POST could buy twice.

        Raises:
            AuthRequiredError: server answered 401 (token is cleared)
            PurchaseError: any other failure, with the server message when present
        """
        client = await self._get_http_client()
        path = f"/sweets/{quote(str(product_id), safe='')}/purchase"

        try:
            response = await client.post(path, json={"quantity": quantity}, headers=self._headers())
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            if status_code == 401:
                self._handle_unauthorized()
                raise AuthRequiredError() from e
            message = _server_message(e.response) or ERROR_PURCHASE_FAILED
            raise PurchaseError(message, status_code) from e
        except httpx.RequestError as e:
            logger.warning(f"Purchase network error for {sanitize_id_for_logging(product_id)}: {e}")
            raise PurchaseError(ERROR_NETWORK) from e

        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {"data": body}
