"""API models for package endpoints.

Request models only check types. Range rules (multiplier, nights, base
rate) are enforced by the package service so violations come back as 400
responses with a readable message.
"""

from typing import Any

from pydantic import Field

from plek_api.models.common import CamelModel
from plek_shared.models.enums import (
    BillingPeriod,
    Entitlement,
    PackageCategory,
    PackageSource,
)


class PackageFields(CamelModel):
    name: str | None = None
    description: str | None = None
    category: str | None = None
    multiplier: float | None = None
    min_nights: int | None = None
    max_nights: int | None = None
    base_rate: float | None = None
    catalog_id: str | None = None
    entitlement: str | None = None
    is_enabled: bool | None = None
    features: list[str] | None = None

    def changes(self) -> dict[str, Any]:
        """Fields the client actually sent, by snake_case name."""
        return self.model_dump(exclude_unset=True)


class PackageCreateRequest(PackageFields):
    post_id: str = Field(..., min_length=1)

    def changes(self) -> dict[str, Any]:
        data = super().changes()
        data.pop("post_id", None)
        # None means "use the default" on create
        return {k: v for k, v in data.items() if v is not None or k == "name"}


class PackageUpdateRequest(PackageFields):
    pass


class PackageResponse(CamelModel):
    package_id: str
    post_id: str | None = None
    name: str
    description: str
    category: PackageCategory
    multiplier: float
    min_nights: int
    max_nights: int
    base_rate: float | None = None
    catalog_id: str | None = None
    entitlement: Entitlement
    is_enabled: bool
    features: list[str]
    source: PackageSource


class PackageListResponse(CamelModel):
    packages: list[PackageResponse]
    total: int


class PackageSuggestionResponse(CamelModel):
    duration: int = Field(..., description="Requested stay in nights")
    package: PackageResponse | None = None


class CatalogProductResponse(CamelModel):
    id: str
    title: str
    description: str
    price: float
    currency: str
    period: BillingPeriod
    period_count: int
    category: PackageCategory
    features: list[str]
    is_enabled: bool
    entitlement: Entitlement
    nights: int


class CatalogProductListResponse(CamelModel):
    products: list[CatalogProductResponse]
    total: int
