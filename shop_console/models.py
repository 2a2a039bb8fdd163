"""
Data models for the shop inventory API.

Each model mirrors one JSON shape exchanged with the backend. The wire format
is camelCase; attributes are snake_case and populated from either form.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DeliveryOption(str, Enum):
    """How customers receive deliveries from a shop."""

    NO_DELIVERY = "NO_DELIVERY"
    IN_HOUSE_DRIVER = "IN_HOUSE_DRIVER"
    THIRD_PARTY_PARTNER = "THIRD_PARTY_PARTNER"


class Role(str, Enum):
    """Session roles issued by the backend."""

    ADMIN = "ADMIN"
    SHOP = "SHOP"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Role"]:
        """Return the matching role, or None for anything unrecognised."""
        try:
            return cls(value)
        except ValueError:
            return None


class ApiModel(BaseModel):
    """Base class for all API payloads."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> Dict[str, Any]:
        """Serialise for a request body, leaving out unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Shop(ApiModel):
    id: int
    name: str
    address: str
    phone: str
    open_hours: str = ""
    delivery_option: DeliveryOption = DeliveryOption.NO_DELIVERY
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    owner_id: Optional[int] = None


class ShopRequest(ApiModel):
    name: str
    address: str
    phone: str
    open_hours: str
    delivery_option: DeliveryOption
    latitude: float
    longitude: float
    owner_id: Optional[int] = None


class Product(ApiModel):
    id: int
    shop_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    price: float
    stock: int
    category: Optional[str] = None


class ProductRequest(ApiModel):
    name: str
    description: Optional[str] = None
    price: float
    stock: int
    category: Optional[str] = None


class LoginRequest(ApiModel):
    username: str
    password: str


class LoginResponse(ApiModel):
    token: str
    role: Role
