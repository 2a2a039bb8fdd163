"""
Form state for product create/update and shop registration.

Inputs arrive as raw strings from the page. Numeric fields are coerced the
way a browser number input behaves: anything unparseable becomes 0, which
then fails the field's minimum and blocks the submit before any request.
"""

from __future__ import annotations

import math
from typing import Callable, List, Optional

import structlog

from shop_console.api import ShopApiClient
from shop_console.exceptions import ShopConsoleError, ValidationError, user_message
from shop_console.geolocation import LocationCapture
from shop_console.models import DeliveryOption, Product, ProductRequest, Shop, ShopRequest

logger = structlog.get_logger(__name__)

PRICE_MIN = 0.01
STOCK_MIN = 0

LOCATION_REQUIRED = "Unable to detect your current location. Please allow location access and try again."


def coerce_price(raw) -> float:
    try:
        value = float(str(raw).strip())
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


def coerce_stock(raw) -> int:
    text = str(raw).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        value = float(text)
    except ValueError:
        return 0
    return int(value) if math.isfinite(value) else 0


class ProductForm:
    """
    Add or edit one product of a shop.

    With no product bound the form creates; otherwise it updates the bound
    product. on_save runs after a successful submit.
    """

    def __init__(self, shop_id: int, product: Optional[Product] = None, on_save: Optional[Callable[[], None]] = None):
        self.shop_id = shop_id
        self.product = product
        self.on_save = on_save
        self.error: Optional[str] = None
        self.submitting = False

        self.name = product.name if product else ""
        self.description = (product.description or "") if product else ""
        self.price = product.price if product else 0.0
        self.stock = product.stock if product else 0
        self.category = (product.category or "") if product else ""

    @property
    def is_edit(self) -> bool:
        return self.product is not None

    @property
    def title(self) -> str:
        return "Edit Product" if self.is_edit else "Add New Product"

    @property
    def submit_label(self) -> str:
        if self.submitting:
            return "Saving..."
        return "Update Product" if self.is_edit else "Add Product"

    def set_values(self, name: str, description: str, price, stock, category: str) -> None:
        self.name = name
        self.description = description
        self.price = coerce_price(price)
        self.stock = coerce_stock(stock)
        self.category = category

    def validate(self) -> List[str]:
        problems = []
        if not self.name.strip():
            problems.append("Product name is required.")
        if self.price < PRICE_MIN:
            problems.append(f"Price must be at least {PRICE_MIN}.")
        if self.stock < STOCK_MIN:
            problems.append("Stock cannot be negative.")
        return problems

    def ensure_valid(self) -> None:
        problems = self.validate()
        if problems:
            raise ValidationError(problems[0], details={"problems": problems})

    def to_request(self) -> ProductRequest:
        return ProductRequest(
            name=self.name,
            description=self.description,
            price=self.price,
            stock=self.stock,
            category=self.category,
        )

    def submit(self, client: ShopApiClient) -> bool:
        if self.submitting:
            return False

        try:
            self.ensure_valid()
        except ValidationError as e:
            self.error = e.message
            return False

        self.error = None
        self.submitting = True
        try:
            if self.product:
                client.update_product(self.product.id, self.to_request())
            else:
                client.add_product(self.shop_id, self.to_request())
        except ShopConsoleError as e:
            self.error = user_message(e, "Failed to save product")
            return False
        finally:
            self.submitting = False

        if self.on_save:
            self.on_save()
        return True


class ShopRegistrationForm:
    """
    Register a shop at the current location.

    Admins may assign the shop to another user by id; for everyone else the
    owner id is ignored and the backend assigns the caller.
    """

    def __init__(self, location: LocationCapture, is_admin: bool = False):
        self.location = location
        self.is_admin = is_admin
        self.name = ""
        self.address = ""
        self.phone = ""
        self.open_hours = ""
        self.delivery_option = DeliveryOption.NO_DELIVERY
        self.owner_id = ""
        self.error: Optional[str] = None
        self.submitting = False

    @property
    def submit_label(self) -> str:
        return "Registering..." if self.submitting else "Register Shop"

    def set_values(
        self, name: str, address: str, phone: str, open_hours: str, delivery_option, owner_id: str = ""
    ) -> None:
        self.name = name
        self.address = address
        self.phone = phone
        self.open_hours = open_hours
        self.delivery_option = DeliveryOption(delivery_option)
        self.owner_id = owner_id or ""

    def resolved_owner_id(self) -> Optional[int]:
        if not self.is_admin or not self.owner_id.strip():
            return None
        try:
            return int(self.owner_id.strip())
        except ValueError:
            return None

    def validate(self) -> List[str]:
        problems = []
        for label, value in (
            ("Shop name", self.name),
            ("Address", self.address),
            ("Phone", self.phone),
            ("Open hours", self.open_hours),
        ):
            if not value.strip():
                problems.append(f"{label} is required.")
        return problems

    def ensure_valid(self) -> None:
        problems = self.validate()
        if problems:
            raise ValidationError(problems[0], details={"problems": problems})

    def submit(self, client: ShopApiClient) -> Optional[Shop]:
        if self.submitting:
            return None

        try:
            self.ensure_valid()
        except ValidationError as e:
            self.error = e.message
            return None

        if self.location.coordinates is None:
            logger.info("Shop registration blocked, no coordinates")
            self.error = LOCATION_REQUIRED
            return None

        request = ShopRequest(
            name=self.name,
            address=self.address,
            phone=self.phone,
            open_hours=self.open_hours,
            delivery_option=self.delivery_option,
            latitude=self.location.coordinates.latitude,
            longitude=self.location.coordinates.longitude,
            owner_id=self.resolved_owner_id(),
        )

        self.error = None
        self.submitting = True
        try:
            return client.register_shop(request)
        except ShopConsoleError as e:
            self.error = user_message(e, "Failed to register shop")
            return None
        finally:
            self.submitting = False
