"""
View controllers for every console page.

Controllers hold the page state (loaded entities, search query, open form,
delete selection, error line) and the actions a page can take. They never
touch Streamlit, so the whole flow can be driven from tests with an
in-memory session store and a stubbed HTTP transport.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

import structlog

from shop_console.api import ShopApiClient
from shop_console.deletion import DeleteFlow
from shop_console.exceptions import ShopConsoleError, user_message
from shop_console.filters import filter_products, filter_shops
from shop_console.formatting import FEATURED_PRODUCTS
from shop_console.forms import ProductForm, ShopRegistrationForm
from shop_console.geolocation import LocationCapture, LocationProvider
from shop_console.models import Product, Shop
from shop_console.permissions import Permissions, resolve_permissions
from shop_console.remote import RemoteCollection, fan_out
from shop_console.session import (
    AuthState,
    Navigator,
    Page,
    SessionGuard,
    SessionStore,
    dashboard_for,
    logout,
)

logger = structlog.get_logger(__name__)


def route_home(store: SessionStore, navigator: Navigator) -> Page:
    """Send an existing session to its dashboard and everyone else to login."""
    session = store.read()
    page = dashboard_for(session) if session.is_valid else Page.LOGIN
    navigator.go(page)
    return page


class LoginView:
    def __init__(self, client: ShopApiClient, store: SessionStore, navigator: Navigator):
        self.client = client
        self.store = store
        self.navigator = navigator
        self.error: Optional[str] = None
        self.loading = False

    def submit(self, username: str, password: str) -> bool:
        if self.loading:
            return False
        if not username or not password:
            self.error = "Please enter username and password"
            return False

        self.error = None
        self.loading = True
        try:
            response = self.client.login(username, password)
        except ShopConsoleError as e:
            self.error = user_message(e, "Login failed")
            return False
        finally:
            self.loading = False

        self.store.write(response.token, response.role)
        logger.info("Logged in", role=response.role.value)
        self.navigator.go(dashboard_for(self.store.read()))
        return True


class GuardedView:
    """Base for pages that need a session. mount() runs the guard, then load()."""

    require_admin = False

    def __init__(self, client: ShopApiClient, store: SessionStore, navigator: Navigator):
        self.client = client
        self.store = store
        self.navigator = navigator
        self.guard = SessionGuard(store, navigator, require_admin=self.require_admin)
        self.auth = AuthState()
        self.permissions = Permissions()
        self.mounted = False

    @property
    def is_admin(self) -> bool:
        return self.auth.session.is_admin

    def mount(self) -> bool:
        self.auth = self.guard.check()
        self.permissions = resolve_permissions(self.auth.session.role)
        if not self.auth.is_authenticated:
            return False
        self.mounted = True
        self.load()
        return True

    def load(self) -> None:
        pass

    def logout(self) -> None:
        logout(self.store, self.navigator)

    def back_to_dashboard(self) -> None:
        self.navigator.go(dashboard_for(self.auth.session))


class ProductEditingMixin(ABC):
    """Add/edit form handling shared by the pages that show a shop's products."""

    form: Optional[ProductForm] = None

    @abstractmethod
    def _editing_shop_id(self) -> Optional[int]: ...

    @abstractmethod
    def load_products(self) -> None: ...

    def open_add_form(self) -> None:
        shop_id = self._editing_shop_id()
        if shop_id is not None:
            self.form = ProductForm(shop_id, on_save=self._product_saved)

    def open_edit_form(self, product: Product) -> None:
        self.form = ProductForm(product.shop_id or self._editing_shop_id(), product, on_save=self._product_saved)

    def close_form(self) -> None:
        self.form = None

    def _product_saved(self) -> None:
        self.form = None
        self.load_products()


class OwnerDashboardView(ProductEditingMixin, GuardedView):
    """A shop owner's shops, the selected shop's details and its products."""

    def __init__(self, client: ShopApiClient, store: SessionStore, navigator: Navigator):
        super().__init__(client, store, navigator)
        self.shops: RemoteCollection[Shop] = RemoteCollection()
        self.products: RemoteCollection[Product] = RemoteCollection()
        self.selected_shop: Optional[Shop] = None
        self.product_delete: DeleteFlow[Product] = DeleteFlow(
            client.delete_product, client.delete_products, "Failed to delete product"
        )

    @property
    def error(self) -> Optional[str]:
        return self.shops.error or self.products.error or self.product_delete.error

    def load(self) -> None:
        self.shops.load(self.client.get_my_shops, "Failed to load shops")
        if self.shops.is_loaded and self.shops.data:
            self.select_shop(self.shops.data[0])

    def select_shop(self, shop: Shop) -> None:
        self.selected_shop = shop
        self.form = None
        self.load_products()

    def _editing_shop_id(self) -> Optional[int]:
        return self.selected_shop.id if self.selected_shop else None

    def load_products(self) -> None:
        if not self.selected_shop:
            return
        shop_id = self.selected_shop.id
        self.products.load(lambda: self.client.get_products(shop_id), "Failed to load products")
        self.product_delete.clear_selection()

    def request_product_delete(self, product: Product) -> None:
        self.product_delete.request_single(product)

    def confirm_product_delete(self) -> None:
        if self.product_delete.confirm():
            self.load_products()

    def go_register_shop(self) -> None:
        self.navigator.go(Page.REGISTER_SHOP)

    def go_delete_shops(self) -> None:
        self.navigator.go(Page.DELETE_SHOPS)

    def open_shop(self, shop_id: int) -> None:
        self.navigator.go(Page.SHOP_DETAIL, shop_id=shop_id)


class ShopDetailView(ProductEditingMixin, GuardedView):
    """
    One shop with a searchable product table.

    Owners can add, edit and bulk-delete products. Admins get the owner id
    and a read-only table.
    """

    def __init__(self, client: ShopApiClient, store: SessionStore, navigator: Navigator, shop_id: Optional[int]):
        super().__init__(client, store, navigator)
        self.shop_id = shop_id
        self.shop_state: RemoteCollection[Shop] = RemoteCollection()
        self.products: RemoteCollection[Product] = RemoteCollection()
        self.query = ""
        self.product_delete: DeleteFlow[Product] = DeleteFlow(
            client.delete_product, client.delete_products, "Failed to delete products"
        )

    @property
    def shop(self) -> Optional[Shop]:
        return self.shop_state.data[0] if self.shop_state.data else None

    @property
    def error(self) -> Optional[str]:
        return self.shop_state.error or self.products.error or self.product_delete.error

    @property
    def filtered_products(self) -> List[Product]:
        return filter_products(self.products.data, self.query)

    def load(self) -> None:
        if self.shop_id is None:
            return
        self.shop_state.load(lambda: [self.client.get_shop(self.shop_id)], "Failed to load shop details")
        self.load_products()

    def _editing_shop_id(self) -> Optional[int]:
        return self.shop_id

    def load_products(self) -> None:
        if self.shop_id is None:
            return
        self.products.load(lambda: self.client.get_products(self.shop_id), "Failed to load products")
        self.product_delete.clear_selection()

    def set_query(self, query: str) -> None:
        self.query = query

    def toggle_all(self) -> None:
        self.product_delete.toggle_all(self.filtered_products)

    def request_bulk_delete(self) -> bool:
        if not self.permissions.can_delete_product:
            return False
        return self.product_delete.request_confirmation(self.products.data)

    def confirm_delete(self) -> None:
        if self.product_delete.confirm():
            self.load_products()

    def cancel_delete(self) -> None:
        self.product_delete.cancel()


class AdminDashboardView(GuardedView):
    """Every shop with its product count, searchable by shop fields and product names."""

    require_admin = True

    def __init__(
        self,
        client: ShopApiClient,
        store: SessionStore,
        navigator: Navigator,
        max_workers: int = 8,
        worker_init: Optional[Callable[[], None]] = None,
    ):
        super().__init__(client, store, navigator)
        self.max_workers = max_workers
        self.worker_init = worker_init
        self.shops: RemoteCollection[Shop] = RemoteCollection()
        self.products_by_shop: Dict[int, List[Product]] = {}
        self.query = ""

    @property
    def error(self) -> Optional[str]:
        return self.shops.error

    def _fetch_shops_with_products(self) -> List[Shop]:
        shops = self.client.get_all_shops()
        self.products_by_shop = fan_out(
            [shop.id for shop in shops],
            self.client.get_products,
            default=list,
            max_workers=self.max_workers,
            initializer=self.worker_init,
        )
        return shops

    def load(self) -> None:
        self.shops.load(self._fetch_shops_with_products, "Failed to load shops")

    def set_query(self, query: str) -> None:
        self.query = query

    @property
    def filtered_shops(self) -> List[Shop]:
        return filter_shops(self.shops.data, self.query, self.products_by_shop)

    @property
    def total_products(self) -> int:
        return sum(len(products) for products in self.products_by_shop.values())

    def product_count(self, shop_id: int) -> int:
        return len(self.products_by_shop.get(shop_id, []))

    def featured_products(self, shop_id: int) -> List[str]:
        return [p.name for p in self.products_by_shop.get(shop_id, [])][:FEATURED_PRODUCTS]

    def go_register_shop(self) -> None:
        self.navigator.go(Page.REGISTER_SHOP)

    def go_delete_shops(self) -> None:
        self.navigator.go(Page.ADMIN_DELETE_SHOPS)

    def open_shop(self, shop_id: int) -> None:
        self.navigator.go(Page.SHOP_DETAIL, shop_id=shop_id)


class DeleteShopsView(GuardedView):
    """Pick shops, confirm, delete. Owners see their own shops, admins see all."""

    def __init__(self, client: ShopApiClient, store: SessionStore, navigator: Navigator, admin: bool = False):
        self.require_admin = admin
        super().__init__(client, store, navigator)
        self.shops: RemoteCollection[Shop] = RemoteCollection()
        self.delete: DeleteFlow[Shop] = DeleteFlow(client.delete_shop, client.delete_shops, "Failed to delete shops")

    @property
    def error(self) -> Optional[str]:
        return self.shops.error or self.delete.error

    def load(self) -> None:
        fetch = self.client.get_all_shops if self.require_admin else self.client.get_my_shops
        self.shops.load(fetch, "Failed to load shops")

    def request_delete(self) -> bool:
        return self.delete.request_confirmation(self.shops.data)

    def confirm_delete(self) -> None:
        if self.delete.confirm():
            self.load()

    def cancel_delete(self) -> None:
        self.delete.cancel()


class RegisterShopView(GuardedView):
    """Shop registration with automatic location capture on entry."""

    def __init__(
        self,
        client: ShopApiClient,
        store: SessionStore,
        navigator: Navigator,
        provider: Optional[LocationProvider],
        timeout: float = 10.0,
    ):
        super().__init__(client, store, navigator)
        self.location = LocationCapture(provider, timeout=timeout)
        self.form = ShopRegistrationForm(self.location)

    def load(self) -> None:
        self.form.is_admin = self.permissions.can_assign_owner
        self.location.capture()

    def refresh_location(self) -> None:
        self.location.capture()

    def submit(self) -> bool:
        shop = self.form.submit(self.client)
        if shop is None:
            return False
        self.back_to_dashboard()
        return True
