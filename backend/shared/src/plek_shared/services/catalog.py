"""Billing catalog product data.

Holds the static table of products sold through the billing vendor and
converts them into ``Package`` instances. The table lives in memory and can
be replaced for tests with ``set_catalog_store``.
"""

from plek_shared.models import (
    BillingPeriod,
    CatalogProduct,
    Entitlement,
    Package,
    PackageCategory,
    PackageSource,
)

_P = BillingPeriod
_C = PackageCategory
_E = Entitlement

DEFAULT_CATALOG: list[CatalogProduct] = [
    CatalogProduct(
        id="per_hour",
        title="Studio Space",
        description="Hourly access to the studio space",
        price=25.00,
        period=_P.HOUR,
        features=["Hourly rental", "Studio access"],
    ),
    CatalogProduct(
        id="virtual_wine",
        title="Virtual Wine Tasting",
        description="A week of guided virtual wine tastings",
        price=5.00,
        period=_P.DAY,
        period_count=7,
        category=_C.ADDON,
        features=["Guided tasting", "Online session"],
    ),
    CatalogProduct(
        id="per_hour_luxury",
        title="Luxury Hourly",
        description="Hosted hourly experience",
        price=389.00,
        period=_P.HOUR,
        category=_C.HOSTED,
        entitlement=_E.PRO,
        features=["Hosted experience", "Premium amenities"],
    ),
    CatalogProduct(
        id="three_nights_customer",
        title="Three Nights",
        description="Three hosted nights",
        price=389.99,
        period=_P.DAY,
        period_count=3,
        category=_C.HOSTED,
        entitlement=_E.PRO,
        features=["3 nights", "Hosted stay"],
    ),
    CatalogProduct(
        id="weekly_customer",
        title="Weekly Stay",
        description="A full week",
        price=1399.99,
        period=_P.DAY,
        period_count=7,
        category=_C.SPECIAL,
        entitlement=_E.PRO,
        features=["7 nights"],
    ),
    CatalogProduct(
        id="week_x2_customer",
        title="Two Weeks",
        description="Two-week stay",
        price=299.99,
        period=_P.DAY,
        period_count=14,
        features=["14 nights"],
    ),
    CatalogProduct(
        id="week_x3_customer",
        title="Three Weeks",
        description="Three-week stay",
        price=399.99,
        period=_P.DAY,
        period_count=21,
        features=["21 nights"],
    ),
    CatalogProduct(
        id="week_x4_customer",
        title="Four Weeks",
        description="Four-week stay",
        price=499.99,
        period=_P.DAY,
        period_count=30,
        features=["30 nights"],
    ),
    CatalogProduct(
        id="monthly",
        title="Monthly",
        description="A month-long stay",
        price=4990.99,
        period=_P.DAY,
        period_count=30,
        features=["30 nights", "Long stay"],
    ),
    CatalogProduct(
        id="gathering",
        title="Gathering",
        description="Single-day event booking",
        price=4999.99,
        period=_P.DAY,
        period_count=1,
        category=_C.SPECIAL,
        features=["Event space", "1 day"],
    ),
    CatalogProduct(
        id="gathering_monthly",
        title="Monthly Gathering",
        description="Recurring monthly event booking",
        price=5000.00,
        period=_P.MONTH,
        category=_C.SPECIAL,
        entitlement=_E.PRO,
        features=["Event space", "Monthly"],
    ),
    CatalogProduct(
        id="weekly",
        title="Weekly",
        description="Weekly plan",
        price=599.99,
        period=_P.WEEK,
        entitlement=_E.PRO,
        features=["7 nights"],
    ),
    CatalogProduct(
        id="hosted7nights",
        title="Hosted 7 Nights",
        description="A hosted week",
        price=999.99,
        period=_P.DAY,
        period_count=7,
        category=_C.SPECIAL,
        entitlement=_E.PRO,
        features=["7 nights", "Hosted stay"],
    ),
    CatalogProduct(
        id="hosted3nights",
        title="Hosted 3 Nights",
        description="A hosted long weekend",
        price=449.99,
        period=_P.DAY,
        period_count=3,
        category=_C.SPECIAL,
        features=["3 nights", "Hosted stay"],
    ),
    CatalogProduct(
        id="per_night_customer",
        title="Per Night",
        description="Single night",
        price=349.99,
        period=_P.DAY,
        category=_C.SPECIAL,
        entitlement=_E.PRO,
        features=["1 night"],
    ),
    CatalogProduct(
        id="per_night_luxury",
        title="Luxury Night",
        description="Single luxury night",
        price=500.99,
        period=_P.DAY,
        category=_C.SPECIAL,
        entitlement=_E.PRO,
        features=["1 night", "Premium amenities"],
    ),
]

_CATALOG: list[CatalogProduct] = list(DEFAULT_CATALOG)


def get_catalog_store() -> list[CatalogProduct]:
    """Get the current catalog table."""
    return _CATALOG


def set_catalog_store(products: list[CatalogProduct] | None) -> None:
    """Replace the catalog table. ``None`` restores the default table."""
    global _CATALOG
    _CATALOG = list(DEFAULT_CATALOG if products is None else products)


def find_product(product_id: str) -> CatalogProduct | None:
    """Look up a catalog product by id, ignoring case."""
    wanted = product_id.lower()
    for product in _CATALOG:
        if product.id.lower() == wanted:
            return product
    return None


def product_to_package(product: CatalogProduct) -> Package:
    """Synthesize a package from a catalog product.

    The product price becomes the package's fixed rate and the billing
    period fixes both min and max nights.
    """
    nights = product.nights
    return Package(
        package_id=product.id,
        name=product.title,
        description=product.description,
        category=product.category,
        multiplier=1.0,
        min_nights=nights,
        max_nights=nights,
        base_rate=product.price,
        catalog_id=product.id,
        entitlement=product.entitlement,
        is_enabled=product.is_enabled,
        features=list(product.features),
        source=PackageSource.REVENUECAT,
    )


def catalog_packages() -> list[Package]:
    """All enabled catalog products as packages."""
    return [product_to_package(p) for p in _CATALOG if p.is_enabled]
