# ==============================================================================
# SHIPPING POLICY
# ==============================================================================
# Shipping price of an order, pluggable behind a small interface
# ==============================================================================

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, Optional

from storefront.core.exceptions import BadRequestError
from storefront.core.settings import settings
from storefront.utils.helpers import quantize_money


class ShippingPolicy(ABC):
    """Computes the shipping price of an order."""

    @abstractmethod
    def quote(self, method: str, items_price: Decimal, item_count: int) -> Decimal:
        """
        Price of shipping an order.

        Args:
            method: Shipping method (standard, express, pickup)
            items_price: Sum of the order's line totals
            item_count: Number of units in the order

        Raises:
            BadRequestError: If the method is not offered
        """
        pass


class FlatRateShippingPolicy(ShippingPolicy):
    """One fixed price per shipping method, independent of the basket."""

    def __init__(self, rates: Optional[Dict[str, Decimal]] = None) -> None:
        if rates is None:
            rates = {
                "standard": settings.SHIPPING_STANDARD_COST,
                "express": settings.SHIPPING_EXPRESS_COST,
                "pickup": settings.SHIPPING_PICKUP_COST,
            }
        self._rates = {method: quantize_money(cost) for method, cost in rates.items()}

    @property
    def methods(self) -> Dict[str, Decimal]:
        return dict(self._rates)

    def quote(self, method: str, items_price: Decimal, item_count: int) -> Decimal:
        if method not in self._rates:
            raise BadRequestError(
                message=f"Unsupported shipping method '{method}'",
                details={"allowed": sorted(self._rates)},
            )
        return self._rates[method]


def get_shipping_policy() -> ShippingPolicy:
    """Policy used by the order workflow."""
    return FlatRateShippingPolicy()
