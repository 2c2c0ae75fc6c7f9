"""Monthly premium calculation."""

from __future__ import annotations

from decimal import Decimal

from coverdrop_app.core.errors import InvalidCoverageError
from coverdrop_app.models.insurance import ProductType

BASE_RATE = Decimal("0.02")
MIN_COVERAGE_RATIO = Decimal("0.5")
MAX_COVERAGE_RATIO = Decimal("2.0")

RISK_MULTIPLIERS: dict[ProductType, Decimal] = {
    ProductType.PHONE: Decimal("1.2"),
    ProductType.LAPTOP: Decimal("1.3"),
    ProductType.TABLET: Decimal("1.1"),
    ProductType.OTHER: Decimal("1.5"),
}


def calculate_premium(
    product_type: ProductType,
    purchase_price: Decimal,
    desired_coverage: Decimal,
) -> Decimal:
    """Return the monthly premium for insuring a product.

    premium = purchase_price * 0.02 * risk_multiplier * coverage_ratio, where
    coverage_ratio = desired_coverage / purchase_price must lie in [0.5, 2.0].
    Raises InvalidCoverageError otherwise.
    """
    price = Decimal(purchase_price)
    coverage = Decimal(desired_coverage)
    if price <= 0:
        raise InvalidCoverageError("Purchase price must be positive.")

    ratio = coverage / price
    if ratio < MIN_COVERAGE_RATIO or ratio > MAX_COVERAGE_RATIO:
        raise InvalidCoverageError(
            f"Coverage ratio {ratio:.4f} is outside [{MIN_COVERAGE_RATIO}, {MAX_COVERAGE_RATIO}]."
        )

    return price * BASE_RATE * RISK_MULTIPLIERS[ProductType(product_type)] * ratio
