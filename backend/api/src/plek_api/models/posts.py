"""API models for post endpoints."""

import datetime as dt

from pydantic import Field

from plek_api.models.common import CamelModel


class PackageSettingModel(CamelModel):
    package_id: str = Field(..., min_length=1)
    enabled: bool = True
    custom_name: str | None = None


class PostCreateRequest(CamelModel):
    title: str
    slug: str | None = None
    base_rate: float | None = Field(default=None, ge=0)
    package_settings: list[PackageSettingModel] = Field(default_factory=list)


class PackageSettingsUpdateRequest(CamelModel):
    package_settings: list[PackageSettingModel]


class PostResponse(CamelModel):
    post_id: str
    title: str
    slug: str | None = None
    base_rate: float
    package_settings: list[PackageSettingModel]
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None


class SubscriptionResponse(CamelModel):
    has_active_subscription: bool
    active_entitlements: list[str]
