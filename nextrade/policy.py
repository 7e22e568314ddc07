"""Access policy: who may create, read and mutate which records.

Route-level summary:

- create product / list own products: wholesalers only
- update / delete product: any authenticated caller, but only on a product
  they own. A missing product and somebody else's product are rejected with
  the same ``Forbidden`` so callers cannot probe which ids exist.
- list orders: any authenticated caller, no ownership filter
- everything else (signup, login, browsing, search, placing an order,
  listing wholesalers, gateway calls) is public
"""
import logging
from typing import Optional

from .auth import Principal
from .errors import Forbidden
from .models import Product, Role

logger = logging.getLogger(__name__)


def can_manage_catalog(role: Role) -> bool:
    if role is Role.WHOLESALER:
        return True
    if role is Role.RETAILER:
        return False
    if role is Role.ADMIN:
        # admins have no catalog rights
        return False
    raise ValueError(f"unknown role: {role!r}")


def require_catalog_manager(principal: Principal) -> Principal:
    if not can_manage_catalog(principal.role):
        logger.info(
            "catalog access denied",
            extra={"user_id": principal.user_id, "role": principal.role.value},
        )
        raise Forbidden("Only wholesalers can manage products")
    return principal


def owned_product_or_forbidden(product: Optional[Product], principal: Principal) -> Product:
    if product is None or product.wholesaler_id != principal.user_id:
        logger.info(
            "product mutation denied",
            extra={"user_id": principal.user_id, "product_id": getattr(product, "id", None)},
        )
        raise Forbidden()
    return product
