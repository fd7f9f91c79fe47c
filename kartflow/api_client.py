"""
HTTP client module for the e-commerce REST backend.

Provides an async client for the products, orders, inventory and
stock-movement endpoints. Every call is timed, logged with structured
fields, tagged with the current request ID, and mapped onto the console's
exception hierarchy. Nothing is retried: a failed call surfaces to the
page as an error toast.
"""

import asyncio
import time
from typing import Any, Awaitable, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from .config import settings
from .exceptions import (
    BackendRequestException,
    BackendResponseException,
    BackendTimeoutException,
    ServiceUnavailableException,
)
from .logging_config import get_logger, get_request_id
from .metrics import track_backend_error, track_backend_request
from .models import (
    Availability,
    InventoryItem,
    InventoryStats,
    Order,
    OrderStats,
    Product,
    RecordId,
    StockMovement,
    parse_records,
)

logger = get_logger(__name__)

SERVICE_NAME = "ecommerce-api"

ModelT = TypeVar("ModelT", bound=BaseModel)


class EcommerceApiClient:
    """
    Client for the e-commerce REST backend.

    Uses a persistent HTTP client with connection pooling. The client is
    created lazily on first use and closed on application shutdown.

    Attributes:
        base_url: Base URL of the backend API
        timeout: Request timeout in seconds
        _client: Persistent httpx.AsyncClient with connection pooling
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Initialize backend client.

        Args:
            base_url: Base URL of the backend API (defaults to settings)
            timeout: Request timeout in seconds (defaults to settings)
        """
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.REQUEST_TIMEOUT
        self._client: Optional[httpx.AsyncClient] = None

        logger.info(
            f"Initialized EcommerceApiClient: base_url={self.base_url}, "
            f"timeout={self.timeout}s"
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """
        Get or create the persistent HTTP client with connection pooling.

        Returns:
            Configured httpx.AsyncClient instance
        """
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                limits=httpx.Limits(
                    max_keepalive_connections=20,
                    max_connections=100,
                    keepalive_expiry=30.0,
                ),
                http2=True,
            )
            logger.debug("Created new HTTP client with connection pooling")
        return self._client

    async def close(self) -> None:
        """
        Close the HTTP client and release connections.

        Should be called during application shutdown.
        """
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
            logger.debug("Closed HTTP client")

    def _get_request_headers(self) -> Dict[str, str]:
        """
        Get common request headers including request ID for tracing.

        Returns:
            Dictionary of HTTP headers
        """
        headers = {
            "User-Agent": "KartFlow-Console/1.0",
            "Accept": "application/json",
        }

        request_id = get_request_id()
        if request_id:
            headers["X-Request-ID"] = request_id

        return headers

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> Any:
        """
        Send a request to the backend and decode the JSON body.

        Args:
            method: HTTP method
            path: Path relative to the base URL, with trailing slash
            operation: Short operation name used for metrics and logs
            params: Query parameters
            json: JSON request body

        Returns:
            Decoded JSON body, or None for empty responses

        Raises:
            BackendTimeoutException: If the request timed out
            ServiceUnavailableException: If the backend could not be reached
            BackendRequestException: If the backend answered with a non-2xx status
        """
        start_time = time.perf_counter()
        request_url = f"{self.base_url}{path}"
        clean_params = {k: v for k, v in (params or {}).items() if v not in (None, "")}

        logger.debug(
            "Sending backend request",
            extra={
                "extra_fields": {
                    "operation": operation,
                    "method": method,
                    "url": request_url,
                    "params": clean_params,
                }
            },
        )

        try:
            client = await self._get_client()
            response = await client.request(
                method,
                request_url,
                params=clean_params or None,
                json=json,
                headers=self._get_request_headers(),
            )
        except (httpx.TimeoutException, TimeoutError) as error:
            duration_ms = (time.perf_counter() - start_time) * 1000
            track_backend_error(SERVICE_NAME, "timeout")
            logger.error(
                "Backend request timed out",
                extra={
                    "extra_fields": {
                        "operation": operation,
                        "method": method,
                        "path": path,
                        "timeout": self.timeout,
                        "duration_ms": duration_ms,
                        "error_type": type(error).__name__,
                    }
                },
            )
            raise BackendTimeoutException(method, path, self.timeout) from error
        except httpx.ConnectError as error:
            duration_ms = (time.perf_counter() - start_time) * 1000
            track_backend_error(SERVICE_NAME, "connection_error")
            logger.error(
                "Connection error to backend",
                extra={
                    "extra_fields": {
                        "operation": operation,
                        "backend_url": self.base_url,
                        "duration_ms": duration_ms,
                        "error_message": str(error),
                    }
                },
            )
            raise ServiceUnavailableException(
                SERVICE_NAME,
                message="Cannot connect to the backend. It may be offline or unreachable.",
                details={"backend_url": self.base_url},
            ) from error
        except httpx.RequestError as error:
            duration_ms = (time.perf_counter() - start_time) * 1000
            track_backend_error(SERVICE_NAME, "request_error")
            logger.error(
                "Request error while calling backend",
                extra={
                    "extra_fields": {
                        "operation": operation,
                        "backend_url": self.base_url,
                        "duration_ms": duration_ms,
                        "error_type": type(error).__name__,
                        "error_message": str(error),
                    }
                },
                exc_info=True,
            )
            raise ServiceUnavailableException(
                SERVICE_NAME,
                message="Network error occurred while communicating with the backend.",
                details={"error_type": type(error).__name__},
            ) from error

        duration_ms = (time.perf_counter() - start_time) * 1000
        track_backend_request(
            SERVICE_NAME, operation, response.status_code, duration_ms / 1000
        )

        if response.status_code >= 400:
            payload = _safe_json(response)
            track_backend_error(SERVICE_NAME, "http_error")
            logger.warning(
                "Backend returned error status",
                extra={
                    "extra_fields": {
                        "operation": operation,
                        "method": method,
                        "path": path,
                        "status_code": response.status_code,
                        "response_body": response.text[:500],
                        "duration_ms": duration_ms,
                    }
                },
            )
            raise BackendRequestException(
                method, path, response.status_code, payload=payload
            )

        logger.info(
            "Backend request completed",
            extra={
                "extra_fields": {
                    "operation": operation,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                }
            },
        )

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as error:
            track_backend_error(SERVICE_NAME, "invalid_json")
            logger.error(
                "Backend returned a non-JSON body",
                extra={
                    "extra_fields": {
                        "operation": operation,
                        "path": path,
                        "content_type": response.headers.get("content-type"),
                        "response_body": response.text[:200],
                    }
                },
            )
            raise BackendResponseException(operation, "response body is not JSON") from error

    def _parse_record(self, model: Type[ModelT], payload: Any) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as error:
            raise _unusable_record(model, error) from error

    def _parse_records(self, model: Type[ModelT], payload: Any) -> List[ModelT]:
        try:
            return parse_records(model, payload)
        except (ValidationError, TypeError) as error:
            raise _unusable_record(model, error) from error

    # ==================== PRODUCTS ====================

    async def list_products(self, params: Optional[Dict[str, Any]] = None) -> List[Product]:
        payload = await self._request("GET", "/products/", "products.list", params=params)
        return self._parse_records(Product, payload)

    async def get_product(self, product_id: RecordId) -> Product:
        payload = await self._request("GET", f"/products/{product_id}/", "products.get")
        return self._parse_record(Product, payload)

    async def create_product(self, data: Dict[str, Any]) -> Optional[Product]:
        payload = await self._request("POST", "/products/", "products.create", json=data)
        return self._parse_record(Product, payload) if payload else None

    async def update_product(
        self, product_id: RecordId, data: Dict[str, Any]
    ) -> Optional[Product]:
        payload = await self._request(
            "PUT", f"/products/{product_id}/", "products.update", json=data
        )
        return self._parse_record(Product, payload) if payload else None

    async def delete_product(self, product_id: RecordId) -> None:
        await self._request("DELETE", f"/products/{product_id}/", "products.delete")

    async def check_availability(self, product_id: RecordId, quantity: int = 1) -> Availability:
        """
        Ask the backend how many units of a product can be sold.

        Args:
            product_id: Product identifier
            quantity: Quantity the caller wants to reserve

        Returns:
            Availability with the available quantity
        """
        payload = await self._request(
            "GET",
            f"/products/{product_id}/check_availability/",
            "products.check_availability",
            params={"quantity": quantity},
        )
        return self._parse_record(Availability, payload or {})

    # ==================== ORDERS ====================

    async def list_orders(self, params: Optional[Dict[str, Any]] = None) -> List[Order]:
        payload = await self._request("GET", "/orders/", "orders.list", params=params)
        return self._parse_records(Order, payload)

    async def get_order(self, order_id: RecordId) -> Order:
        payload = await self._request("GET", f"/orders/{order_id}/", "orders.get")
        return self._parse_record(Order, payload)

    async def create_order(self, data: Dict[str, Any]) -> Optional[Order]:
        payload = await self._request("POST", "/orders/", "orders.create", json=data)
        return self._parse_record(Order, payload) if payload else None

    async def update_order_status(self, order_id: RecordId, status: str) -> Any:
        return await self._request(
            "PATCH",
            f"/orders/{order_id}/update_status/",
            "orders.update_status",
            json={"status": status},
        )

    async def cancel_order(self, order_id: RecordId) -> Any:
        return await self._request("POST", f"/orders/{order_id}/cancel/", "orders.cancel")

    async def my_orders(self) -> List[Order]:
        payload = await self._request("GET", "/orders/my_orders/", "orders.my_orders")
        return self._parse_records(Order, payload)

    async def order_stats(self) -> OrderStats:
        payload = await self._request("GET", "/orders/order_stats/", "orders.stats")
        return self._parse_record(OrderStats, payload or {})

    # ==================== INVENTORY ====================

    async def list_inventory(
        self, params: Optional[Dict[str, Any]] = None
    ) -> List[InventoryItem]:
        payload = await self._request("GET", "/inventory/", "inventory.list", params=params)
        return self._parse_records(InventoryItem, payload)

    async def get_inventory_item(self, item_id: RecordId) -> InventoryItem:
        payload = await self._request("GET", f"/inventory/{item_id}/", "inventory.get")
        return self._parse_record(InventoryItem, payload)

    async def update_stock(self, item_id: RecordId, data: Dict[str, Any]) -> Any:
        return await self._request(
            "POST", f"/inventory/{item_id}/update_stock/", "inventory.update_stock", json=data
        )

    async def reserve_stock(self, item_id: RecordId, data: Dict[str, Any]) -> Any:
        return await self._request(
            "POST", f"/inventory/{item_id}/reserve_stock/", "inventory.reserve_stock", json=data
        )

    async def release_reservation(self, item_id: RecordId, data: Dict[str, Any]) -> Any:
        return await self._request(
            "POST",
            f"/inventory/{item_id}/release_reservation/",
            "inventory.release_reservation",
            json=data,
        )

    async def low_stock_items(self) -> List[InventoryItem]:
        payload = await self._request(
            "GET", "/inventory/low_stock_items/", "inventory.low_stock_items"
        )
        return self._parse_records(InventoryItem, payload)

    async def inventory_stats(self) -> InventoryStats:
        payload = await self._request(
            "GET", "/inventory/inventory_stats/", "inventory.stats"
        )
        return self._parse_record(InventoryStats, payload or {})

    async def stock_movements(
        self, params: Optional[Dict[str, Any]] = None
    ) -> List[StockMovement]:
        payload = await self._request(
            "GET", "/stock-movements/", "stock_movements.list", params=params
        )
        return self._parse_records(StockMovement, payload)

    # ==================== HEALTH ====================

    async def health_check(self) -> bool:
        """
        Check if the backend is healthy and responding.

        Returns:
            True if the backend answered 200, False otherwise
        """
        try:
            client = await self._get_client()
            response = await client.get(
                f"{self.base_url}/health/",
                headers=self._get_request_headers(),
                timeout=1.0,
            )
            is_healthy = response.status_code == 200

            if not is_healthy:
                logger.warning(
                    "Backend health check failed",
                    extra={
                        "extra_fields": {
                            "backend_url": self.base_url,
                            "status_code": response.status_code,
                        }
                    },
                )

            return is_healthy

        except Exception as error:
            logger.warning(
                "Backend health check failed with exception",
                extra={
                    "extra_fields": {
                        "backend_url": self.base_url,
                        "error_type": type(error).__name__,
                        "error_message": str(error),
                    }
                },
            )
            return False


async def fetch_all(*calls: Awaitable[Any]) -> List[Any]:
    """
    Await backend calls concurrently and return their results in order.

    Every call runs to completion before the first failure is re-raised.
    """
    results = await asyncio.gather(*calls, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _unusable_record(model: Type[BaseModel], error: Exception) -> BackendResponseException:
    track_backend_error(SERVICE_NAME, "invalid_record")
    logger.error(
        "Backend record does not match the console model",
        extra={
            "extra_fields": {
                "model": model.__name__,
                "error_type": type(error).__name__,
                "error_message": str(error)[:500],
            }
        },
    )
    return BackendResponseException(
        f"parse.{model.__name__}", f"{model.__name__} record could not be parsed"
    )


# Singleton instance for application-wide use
api_client = EcommerceApiClient()
