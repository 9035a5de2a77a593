"""Package models.

A package is a pricing tier or add-on for a post. Database packages are
owned by a single post; catalog packages are synthesized from the billing
catalog and have no owner.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from plek_shared.models.enums import (
    Entitlement,
    MatchStrategy,
    PackageCategory,
    PackageSource,
)
from plek_shared.models.post import PackageSetting

MIN_MULTIPLIER = 0.1
MAX_MULTIPLIER = 3.0


class Package(BaseModel):
    """A pricing package."""

    model_config = ConfigDict(strict=True)

    package_id: str
    post_id: str | None = None
    name: str = Field(..., min_length=1)
    description: str = ""
    category: PackageCategory = PackageCategory.STANDARD
    multiplier: float = Field(default=1.0, ge=MIN_MULTIPLIER, le=MAX_MULTIPLIER)
    min_nights: int = Field(default=1, ge=1)
    max_nights: int = Field(default=7, ge=1)
    base_rate: float | None = Field(default=None, ge=0)
    catalog_id: str | None = None
    entitlement: Entitlement = Entitlement.STANDARD
    is_enabled: bool = True
    features: list[str] = Field(default_factory=list)
    source: PackageSource = PackageSource.DATABASE

    @model_validator(mode="after")
    def validate_night_range(self) -> "Package":
        """Ensure max_nights is not below min_nights."""
        if self.max_nights < self.min_nights:
            raise ValueError("max_nights must be greater than or equal to min_nights")
        return self

    def matches(self, identifier: str) -> MatchStrategy | None:
        """Match an identifier against id or catalog id, ignoring case."""
        wanted = identifier.lower()
        if self.package_id.lower() == wanted:
            return MatchStrategy.CANDIDATE_ID
        if self.catalog_id and self.catalog_id.lower() == wanted:
            return MatchStrategy.CANDIDATE_CATALOG_ID
        return None

    def fits(self, nights: int) -> bool:
        """True when ``nights`` falls inside [min_nights, max_nights]."""
        return self.min_nights <= nights <= self.max_nights


class PackageResolution(BaseModel):
    """Outcome of resolving a requested package identifier.

    Records which lookup strategy produced the match so callers can tell
    an exact id hit from a legacy name fallback.
    """

    model_config = ConfigDict(strict=True)

    package: Package
    strategy: MatchStrategy
    display_name: str
    setting: PackageSetting | None = None

    @property
    def source(self) -> PackageSource:
        return self.package.source

    @property
    def is_database(self) -> bool:
        return self.package.source == PackageSource.DATABASE
