"""Validate the HTTP client: auth header, 401 handling, error translation, endpoints."""

import httpx
import pytest

from sample_data import product_json, shop_json
from shop_console.exceptions import ApiError, TransportError, UnauthorizedError, user_message
from shop_console.models import DeliveryOption, ProductRequest, Role, ShopRequest
from shop_console.session import MemorySessionStore, Page


class TestAuthorization:
    """Bearer token handling and the global 401 response."""

    def test_bearer_token_attached(self, client, backend):
        backend.add("GET", "/api/v1/shops/mine", body=[])

        client.get_my_shops()

        assert backend.requests[0].headers["Authorization"] == "Bearer tok-123"

    def test_no_header_without_token(self, backend, navigator):
        from conftest import make_client

        anonymous = make_client(backend, MemorySessionStore(), navigator)
        backend.add("POST", "/api/v1/auth/login", body={"token": "t", "role": "SHOP"})

        anonymous.login("owner", "secret")

        assert "Authorization" not in backend.requests[0].headers

    @pytest.mark.parametrize(
        "method,path,call",
        [
            ("GET", "/api/v1/shops/mine", lambda c: c.get_my_shops()),
            ("GET", "/api/v1/shops/4/products", lambda c: c.get_products(4)),
            ("DELETE", "/api/v1/products/bulk", lambda c: c.delete_products([1, 2])),
        ],
    )
    def test_401_clears_session_and_redirects(self, client, backend, store, navigator, method, path, call):
        backend.add(method, path, status=401)

        with pytest.raises(UnauthorizedError):
            call(client)

        session = store.read()
        assert session.token is None
        assert session.role is None
        assert navigator.page == Page.LOGIN


class TestErrorTranslation:
    """Non-success responses become ShopConsoleError subclasses."""

    def test_client_error_uses_server_message(self, client, backend):
        backend.add("POST", "/api/v1/shops/1/products", status=400, body={"error": "Price must be positive"})

        with pytest.raises(ApiError) as exc_info:
            client.add_product(1, ProductRequest(name="Tea", price=1.0, stock=1))

        assert exc_info.value.status_code == 400
        assert exc_info.value.server_message == "Price must be positive"
        assert user_message(exc_info.value, "Failed to save product") == "Price must be positive"

    def test_server_error_uses_fallback(self, client, backend):
        backend.add("GET", "/api/v1/shops/mine", status=500, body={"error": "NullPointerException"})

        with pytest.raises(ApiError) as exc_info:
            client.get_my_shops()

        assert exc_info.value.server_message is None
        assert user_message(exc_info.value, "Failed to load shops") == "Failed to load shops"

    def test_transport_failure(self, client, backend):
        backend.add("GET", "/api/v1/shops", error=httpx.ConnectError("connection refused"))

        with pytest.raises(TransportError):
            client.get_all_shops()

    def test_malformed_payload(self, client, backend):
        backend.add("GET", "/api/v1/shops/2", body={"id": 2, "name": "No address"})

        with pytest.raises(ApiError):
            client.get_shop(2)


class TestEndpoints:
    """Each client method hits the documented path with the right body."""

    def test_login_returns_token_and_role(self, client, backend):
        backend.add("POST", "/api/v1/auth/login", body={"token": "abc", "role": "ADMIN"})

        response = client.login("admin", "pw")

        assert response.token == "abc"
        assert response.role is Role.ADMIN
        assert backend.body_of(backend.requests[0]) == {"username": "admin", "password": "pw"}

    def test_shop_parsing_uses_camel_case(self, client, backend):
        backend.add("GET", "/api/v1/shops/7", body=shop_json(7, deliveryOption="IN_HOUSE_DRIVER"))

        shop = client.get_shop(7)

        assert shop.open_hours == "Mon-Sat: 9 AM - 9 PM"
        assert shop.delivery_option is DeliveryOption.IN_HOUSE_DRIVER
        assert shop.owner_id == 1

    def test_register_shop_omits_unset_owner(self, client, backend):
        backend.add("POST", "/api/v1/shops", status=201, body=shop_json(3))
        request = ShopRequest(
            name="Corner",
            address="2 High St",
            phone="555",
            open_hours="9-5",
            delivery_option=DeliveryOption.THIRD_PARTY_PARTNER,
            latitude=1.5,
            longitude=2.5,
        )

        client.register_shop(request)

        body = backend.body_of(backend.requests[0])
        assert "ownerId" not in body
        assert body["openHours"] == "9-5"
        assert body["deliveryOption"] == "THIRD_PARTY_PARTNER"

    def test_bulk_delete_sends_id_list(self, client, backend):
        backend.add("DELETE", "/api/v1/shops/bulk", status=204)

        client.delete_shops([7, 9])

        assert backend.body_of(backend.requests[0]) == [7, 9]

    def test_single_deletes(self, client, backend):
        backend.add("DELETE", "/api/v1/shops/7", status=204)
        backend.add("DELETE", "/api/v1/products/11", status=204)

        client.delete_shop(7)
        client.delete_product(11)

        assert [r.url.path for r in backend.requests] == ["/api/v1/shops/7", "/api/v1/products/11"]

    def test_update_product(self, client, backend):
        backend.add("PUT", "/api/v1/products/5", body=product_json(5, price=3.5))

        product = client.update_product(5, ProductRequest(name="Tea", price=3.5, stock=2, category="Drinks"))

        assert product.price == 3.5
        assert backend.body_of(backend.requests[0])["category"] == "Drinks"
