"""Display helpers for cards, tables and confirmation lists."""

import html
from typing import Optional

from shop_console.models import DeliveryOption, Product, Shop

DELIVERY_LABELS = {
    DeliveryOption.NO_DELIVERY: "No Delivery Service",
    DeliveryOption.IN_HOUSE_DRIVER: "In-house Delivery Driver",
    DeliveryOption.THIRD_PARTY_PARTNER: "3rd Party Delivery Partner",
}

# Shorter wording for the badge on shop cards
DELIVERY_BADGES = {
    DeliveryOption.NO_DELIVERY: "No Delivery",
    DeliveryOption.IN_HOUSE_DRIVER: "In-house Delivery",
    DeliveryOption.THIRD_PARTY_PARTNER: "3rd Party Delivery",
}

FEATURED_PRODUCTS = 3


def delivery_label(option, short: bool = False) -> str:
    labels = DELIVERY_BADGES if short else DELIVERY_LABELS
    try:
        return labels[DeliveryOption(option)]
    except ValueError:
        return str(option)


def format_coordinate(value: Optional[float]) -> str:
    if value is None:
        return "N/A"
    return f"{value:.6f}"


def format_price(price: float) -> str:
    return f"${price:.2f}"


def or_dash(value: Optional[str]) -> str:
    return value or "-"


def pluralize(count: int, singular: str, plural: Optional[str] = None) -> str:
    word = singular if count == 1 else (plural or singular + "s")
    return f"{count} {word}"


def found_message(count: int, noun: str) -> str:
    return f"Found {pluralize(count, noun)}"


# Confirmation targets are rendered as raw HTML, so every server value is escaped
def describe_shop(shop: Shop) -> str:
    return (
        f"<strong>{html.escape(shop.name)}</strong><br/>"
        f"Owner ID: {shop.owner_id} • {html.escape(shop.address)} • {html.escape(shop.phone)}<br/>"
        f"Open Hours: {html.escape(shop.open_hours)}<br/>"
        f"Delivery: {html.escape(delivery_label(shop.delivery_option))}"
    )


def describe_product(product: Product) -> str:
    return (
        f"<strong>{html.escape(product.name)}</strong><br/>"
        f"Price: {format_price(product.price)} • Stock: {product.stock}"
    )
