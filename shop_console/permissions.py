"""
Role to capability resolution.

These flags only decide which controls the console shows. The backend must
authorise every call on its own; hiding a button is not an access boundary.
"""

from dataclasses import dataclass
from typing import Optional

from shop_console.models import Role


@dataclass(frozen=True)
class Permissions:
    can_create_shop: bool = False
    can_assign_owner: bool = False
    can_view_all_shops: bool = False
    can_delete_own_shop: bool = False
    can_delete_any_shop: bool = False
    can_edit_product: bool = False
    can_delete_product: bool = False
    can_view_owner: bool = False


ADMIN_PERMISSIONS = Permissions(
    can_create_shop=True,
    can_assign_owner=True,
    can_view_all_shops=True,
    can_delete_any_shop=True,
    can_view_owner=True,
)

SHOP_PERMISSIONS = Permissions(
    can_create_shop=True,
    can_delete_own_shop=True,
    can_edit_product=True,
    can_delete_product=True,
)


def resolve_permissions(role: Optional[Role]) -> Permissions:
    if role is Role.ADMIN:
        return ADMIN_PERMISSIONS
    if role is Role.SHOP:
        return SHOP_PERMISSIONS
    return Permissions()
