"""Post (listing) models.

A Post is a bookable property. Hosts attach per-post package settings that
can disable a package or give it a custom display name for that post only.
"""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field


class PackageSetting(BaseModel):
    """Per-post override for a single package."""

    model_config = ConfigDict(strict=True)

    package_id: str = Field(..., min_length=1)
    enabled: bool = True
    custom_name: str | None = None


class Post(BaseModel):
    """A bookable property listing."""

    model_config = ConfigDict(strict=True)

    post_id: str
    title: str = ""
    slug: str | None = None
    base_rate: float = Field(default=150.0, ge=0)
    package_settings: list[PackageSetting] = Field(default_factory=list)
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None

    def setting_for(self, package_id: str) -> PackageSetting | None:
        """Return the override for a package, if the host configured one."""
        for setting in self.package_settings:
            if setting.package_id == package_id:
                return setting
        return None

    def is_package_disabled(self, package_id: str) -> bool:
        """True when the host explicitly disabled the package for this post."""
        setting = self.setting_for(package_id)
        return setting is not None and not setting.enabled

    def is_package_enabled(self, package_id: str) -> bool:
        """True only when the host explicitly enabled the package."""
        setting = self.setting_for(package_id)
        return setting is not None and setting.enabled

    def custom_name_for(self, package_id: str) -> str | None:
        setting = self.setting_for(package_id)
        if setting and setting.custom_name:
            return setting.custom_name
        return None
