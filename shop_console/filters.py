"""Search predicates for shops and products. Queries arrive lowercased."""

from typing import List, Mapping, Optional, Sequence

from shop_console.models import Product, Shop
from shop_console.remote import filter_items


def _contains(value: Optional[str], needle: str) -> bool:
    return bool(value) and needle in value.lower()


def product_matches(product: Product, needle: str) -> bool:
    return (
        _contains(product.name, needle)
        or _contains(product.description, needle)
        or _contains(product.category, needle)
    )


def shop_matches(shop: Shop, needle: str, products: Sequence[Product] = ()) -> bool:
    if _contains(shop.name, needle) or _contains(shop.address, needle) or _contains(shop.phone, needle):
        return True
    return any(_contains(p.name, needle) for p in products)


def filter_products(products: Sequence[Product], query: str) -> List[Product]:
    return filter_items(products, query, product_matches)


def filter_shops(
    shops: Sequence[Shop], query: str, products_by_shop: Optional[Mapping[int, Sequence[Product]]] = None
) -> List[Shop]:
    products_by_shop = products_by_shop or {}
    return filter_items(shops, query, lambda shop, needle: shop_matches(shop, needle, products_by_shop.get(shop.id, ())))
