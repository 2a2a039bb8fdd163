"""
HTTP client for the shop inventory REST API.

Attaches the session's bearer token to every request. A 401 from any endpoint
clears the stored session and sends the navigator to the login page before
UnauthorizedError is raised, so callers never need to handle it themselves.
"""

import threading
from typing import Any, List, Optional, Type, TypeVar

import httpx
import pydantic
import structlog

from shop_console.exceptions import ApiError, TransportError, UnauthorizedError
from shop_console.models import (
    LoginRequest,
    LoginResponse,
    Product,
    ProductRequest,
    Shop,
    ShopRequest,
)
from shop_console.session import Navigator, Page, SessionStore

logger = structlog.get_logger(__name__)

API_PREFIX = "/api/v1"
GENERIC_ERROR = "Request failed. Please try again."

M = TypeVar("M", bound=pydantic.BaseModel)


def error_message(response: httpx.Response) -> Optional[str]:
    """Pull the server's error text out of a JSON body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        for key in ("error", "message"):
            if body.get(key):
                return str(body[key])
    return None


class ShopApiClient:
    """Thin wrapper over the backend endpoints, one method per endpoint."""

    def __init__(
        self,
        base_url: str,
        store: SessionStore,
        navigator: Navigator,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.store = store
        self.navigator = navigator
        self._unauthorized_lock = threading.Lock()

        # API calls carry no timeout of their own
        self.client = httpx.Client(
            base_url=base_url,
            timeout=httpx.Timeout(None),
            headers={"Accept": "application/json"},
            transport=transport,
            event_hooks={"request": [self._attach_token]},
        )

    def close(self) -> None:
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _attach_token(self, request: httpx.Request) -> None:
        token = self.store.read().token
        if token:
            request.headers["Authorization"] = f"Bearer {token}"

    def _handle_unauthorized(self, method: str, path: str) -> None:
        with self._unauthorized_lock:
            logger.warning("API returned 401, clearing session", method=method, path=path)
            self.store.clear()
            self.navigator.go(Page.LOGIN)

    def _request(self, method: str, path: str, json_data: Any = None) -> Any:
        """
        Send one request and return the decoded JSON body (None when empty).

        Raises:
            UnauthorizedError: On 401, after the session has been cleared
            ApiError: On any other non-success status
            TransportError: When no response was received
        """
        logger.debug("API request", method=method, path=path, has_body=json_data is not None)
        try:
            response = self.client.request(method, f"{API_PREFIX}{path}", json=json_data)
        except httpx.HTTPError as e:
            logger.error("API request failed", method=method, path=path, error=str(e))
            raise TransportError("Unable to reach the server.", details={"path": path}) from e

        if response.status_code == 401:
            self._handle_unauthorized(method, path)
            raise UnauthorizedError()

        if response.is_error:
            # 5xx bodies are not shown to users
            server_message = error_message(response) if response.is_client_error else None
            logger.warning(
                "API request rejected", method=method, path=path, status=response.status_code, error=server_message
            )
            raise ApiError(
                GENERIC_ERROR, status_code=response.status_code, server_message=server_message, details={"path": path}
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError("Unexpected response from server.", status_code=response.status_code) from e

    @staticmethod
    def _parse(model: Type[M], data: Any) -> M:
        try:
            return model.model_validate(data)
        except pydantic.ValidationError as e:
            logger.error("Malformed API payload", model=model.__name__, errors=e.error_count())
            raise ApiError("Unexpected response from server.", status_code=200) from e

    def _parse_list(self, model: Type[M], data: Any) -> List[M]:
        return [self._parse(model, item) for item in data or []]

    # Auth

    def login(self, username: str, password: str) -> LoginResponse:
        body = LoginRequest(username=username, password=password).to_payload()
        return self._parse(LoginResponse, self._request("POST", "/auth/login", body))

    # Shops

    def register_shop(self, request: ShopRequest) -> Shop:
        logger.info("Registering shop", name=request.name, owner_id=request.owner_id)
        return self._parse(Shop, self._request("POST", "/shops", request.to_payload()))

    def get_my_shops(self) -> List[Shop]:
        return self._parse_list(Shop, self._request("GET", "/shops/mine"))

    def get_all_shops(self) -> List[Shop]:
        return self._parse_list(Shop, self._request("GET", "/shops"))

    def get_shop(self, shop_id: int) -> Shop:
        return self._parse(Shop, self._request("GET", f"/shops/{shop_id}"))

    def delete_shop(self, shop_id: int) -> None:
        logger.info("Deleting shop", shop_id=shop_id)
        self._request("DELETE", f"/shops/{shop_id}")

    def delete_shops(self, shop_ids: List[int]) -> None:
        logger.info("Bulk deleting shops", shop_ids=list(shop_ids))
        self._request("DELETE", "/shops/bulk", list(shop_ids))

    # Products

    def add_product(self, shop_id: int, request: ProductRequest) -> Product:
        logger.info("Adding product", shop_id=shop_id, name=request.name)
        return self._parse(Product, self._request("POST", f"/shops/{shop_id}/products", request.to_payload()))

    def get_products(self, shop_id: int) -> List[Product]:
        return self._parse_list(Product, self._request("GET", f"/shops/{shop_id}/products"))

    def update_product(self, product_id: int, request: ProductRequest) -> Product:
        logger.info("Updating product", product_id=product_id)
        return self._parse(Product, self._request("PUT", f"/products/{product_id}", request.to_payload()))

    def delete_product(self, product_id: int) -> None:
        logger.info("Deleting product", product_id=product_id)
        self._request("DELETE", f"/products/{product_id}")

    def delete_products(self, product_ids: List[int]) -> None:
        logger.info("Bulk deleting products", product_ids=list(product_ids))
        self._request("DELETE", "/products/bulk", list(product_ids))
