"""Package service and resolver.

``PackageService`` owns the packages table (create, read, update, delete)
and builds the per-post package listing. ``PackageResolver`` turns a
requested package identifier into a package by trying an ordered list of
lookup strategies.
"""

import datetime as dt
import uuid
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from botocore.exceptions import ClientError

from plek_shared.models import (
    MAX_MULTIPLIER,
    MIN_MULTIPLIER,
    CatalogProduct,
    Entitlement,
    ErrorCode,
    MatchStrategy,
    NotFoundError,
    Package,
    PackageCategory,
    PackageResolution,
    PackageSource,
    Post,
    ValidationError,
)
from plek_shared.services.catalog import (
    catalog_packages,
    find_product,
    get_catalog_store,
    product_to_package,
)
from plek_shared.services.pricing import compute_duration, suggest_package
from plek_shared.utils.logging import get_logger

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService
    from .posts import PostService

logger = get_logger(__name__)

PACKAGE_DEFAULTS: dict[str, Any] = {
    "description": "",
    "category": PackageCategory.STANDARD.value,
    "multiplier": 1.0,
    "min_nights": 1,
    "max_nights": 7,
    "entitlement": Entitlement.STANDARD.value,
    "is_enabled": True,
    "features": [],
}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _fail(message: str, field: str) -> ValidationError:
    return ValidationError(message=message, details={"field": field})


def clean_package_fields(data: dict[str, Any], partial: bool = False) -> dict[str, Any]:
    """Validate and normalize writable package fields.

    Unknown keys are dropped. With ``partial=False`` the name is required.

    Raises:
        ValidationError: With a field-specific message
    """
    cleaned: dict[str, Any] = {}

    if "name" in data or not partial:
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise _fail("Package name cannot be empty", "name")
        cleaned["name"] = name.strip()

    if "description" in data:
        cleaned["description"] = str(data["description"] or "")

    if "multiplier" in data:
        multiplier = data["multiplier"]
        if not _is_number(multiplier) or not (
            MIN_MULTIPLIER <= multiplier <= MAX_MULTIPLIER
        ):
            raise _fail(
                f"Multiplier must be between {MIN_MULTIPLIER} and {MAX_MULTIPLIER}",
                "multiplier",
            )
        cleaned["multiplier"] = float(multiplier)

    if "min_nights" in data:
        min_nights = data["min_nights"]
        if not _is_number(min_nights) or min_nights < 1 or int(min_nights) != min_nights:
            raise _fail("Min nights must be at least 1", "min_nights")
        cleaned["min_nights"] = int(min_nights)

    if "max_nights" in data:
        max_nights = data["max_nights"]
        if not _is_number(max_nights) or max_nights < 1 or int(max_nights) != max_nights:
            raise _fail("Max nights must be at least 1", "max_nights")
        cleaned["max_nights"] = int(max_nights)

    if "base_rate" in data:
        base_rate = data["base_rate"]
        if base_rate is not None and (not _is_number(base_rate) or base_rate < 0):
            raise _fail("Base rate must be a positive number", "base_rate")
        cleaned["base_rate"] = None if base_rate is None else float(base_rate)

    if "category" in data:
        try:
            cleaned["category"] = PackageCategory(data["category"]).value
        except ValueError as e:
            raise _fail(f"Invalid category: {data['category']}", "category") from e

    if "entitlement" in data:
        try:
            cleaned["entitlement"] = Entitlement(data["entitlement"]).value
        except ValueError as e:
            raise _fail(
                f"Invalid entitlement: {data['entitlement']}", "entitlement"
            ) from e

    if "is_enabled" in data:
        if not isinstance(data["is_enabled"], bool):
            raise _fail("isEnabled must be a boolean", "is_enabled")
        cleaned["is_enabled"] = data["is_enabled"]

    if "features" in data:
        features = data["features"] or []
        if not isinstance(features, list) or not all(isinstance(f, str) for f in features):
            raise _fail("Features must be a list of strings", "features")
        cleaned["features"] = [f for f in features if f.strip()]

    if "catalog_id" in data:
        cleaned["catalog_id"] = data["catalog_id"] or None

    return cleaned


class PackageService:
    """Service for database packages and per-post listings."""

    TABLE = "packages"
    POST_INDEX = "post_id-index"

    def __init__(self, db: "DynamoDBService", posts: "PostService") -> None:
        self.db = db
        self.posts = posts

    def get_package(self, package_id: str) -> Package | None:
        item = self.db.get_item(self.TABLE, {"package_id": package_id})
        if not item:
            return None
        return self._item_to_package(item)

    def require_package(self, package_id: str) -> Package:
        """Get a package or raise NotFoundError."""
        package = self.get_package(package_id)
        if package is None:
            raise NotFoundError(ErrorCode.PACKAGE_RECORD_NOT_FOUND)
        return package

    def list_packages(self, post_id: str) -> list[Package]:
        """All database packages of a post, oldest first."""
        items = self.db.query_by_gsi(
            table=self.TABLE,
            index_name=self.POST_INDEX,
            partition_key_name="post_id",
            partition_key_value=post_id,
        )
        items.sort(key=lambda i: (i.get("created_at", ""), i["package_id"]))
        return [self._item_to_package(item) for item in items]

    def create_package(self, post_id: str, data: dict[str, Any]) -> Package:
        """Create a database package for a post.

        Raises:
            ValidationError: If a field is invalid
            NotFoundError: If the post does not exist
        """
        cleaned = {**PACKAGE_DEFAULTS, **clean_package_fields(data)}
        self._check_night_range(cleaned["min_nights"], cleaned["max_nights"])
        if self.posts.get_post(post_id) is None:
            raise NotFoundError(ErrorCode.POST_NOT_FOUND)

        now = dt.datetime.now(dt.UTC).isoformat()
        item = {
            **cleaned,
            "package_id": str(uuid.uuid4()),
            "post_id": post_id,
            "source": PackageSource.DATABASE.value,
            "created_at": now,
            "updated_at": now,
        }
        self.db.put_item(
            self.TABLE, item, condition_expression="attribute_not_exists(package_id)"
        )
        logger.info(
            "Package created",
            extra={"package_id": item["package_id"], "post_id": post_id},
        )
        return self._item_to_package(item)

    def update_package(self, package_id: str, data: dict[str, Any]) -> Package:
        """Apply a partial update.

        Raises:
            ValidationError: If a field is invalid or nothing is updatable
            NotFoundError: If the package does not exist
        """
        cleaned = clean_package_fields(data, partial=True)
        if not cleaned:
            raise ValidationError(message="No valid fields to update")

        current = self.require_package(package_id)
        self._check_night_range(
            cleaned.get("min_nights", current.min_nights),
            cleaned.get("max_nights", current.max_nights),
        )

        cleaned["updated_at"] = dt.datetime.now(dt.UTC).isoformat()
        set_parts: list[str] = []
        remove_parts: list[str] = []
        names: dict[str, str] = {}
        values: dict[str, Any] = {}
        for i, (field, value) in enumerate(cleaned.items()):
            names[f"#f{i}"] = field
            if value is None:
                remove_parts.append(f"#f{i}")
            else:
                set_parts.append(f"#f{i} = :v{i}")
                values[f":v{i}"] = value

        expression = "SET " + ", ".join(set_parts)
        if remove_parts:
            expression += " REMOVE " + ", ".join(remove_parts)

        attrs = self.db.update_item(
            table=self.TABLE,
            key={"package_id": package_id},
            update_expression=expression,
            expression_attribute_values=values,
            expression_attribute_names=names,
            condition_expression="attribute_exists(package_id)",
        )
        if attrs is None:
            raise NotFoundError(ErrorCode.PACKAGE_RECORD_NOT_FOUND)
        logger.info(
            "Package updated",
            extra={"package_id": package_id, "fields": sorted(cleaned)},
        )
        return self._item_to_package(attrs)

    def delete_package(self, package_id: str) -> None:
        self.require_package(package_id)
        self.db.delete_item(self.TABLE, {"package_id": package_id})
        logger.info("Package deleted", extra={"package_id": package_id})

    def list_packages_for_post(self, post_id: str) -> list[Package]:
        """Packages offered on a post, with custom names applied.

        Enabled database packages not disabled by the host come first,
        followed by catalog products the host explicitly enabled.
        """
        post = self.posts.get_post(post_id)
        offered: list[Package] = []

        for package in self.list_packages(post_id):
            if not package.is_enabled:
                continue
            if post and post.is_package_disabled(package.package_id):
                continue
            offered.append(_with_custom_name(package, post))

        if post:
            for package in catalog_packages():
                if post.is_package_enabled(package.package_id):
                    offered.append(_with_custom_name(package, post))

        return offered

    def available_products(self) -> list[CatalogProduct]:
        """The billing catalog table."""
        return list(get_catalog_store())

    def suggest_for_stay(
        self, post_id: str, from_date: dt.date, to_date: dt.date
    ) -> tuple[Package | None, int]:
        """Best-fit package for a stay, with the computed duration."""
        duration = compute_duration(from_date, to_date)
        return suggest_package(self.list_packages_for_post(post_id), duration), duration

    @staticmethod
    def _check_night_range(min_nights: int, max_nights: int) -> None:
        if max_nights < min_nights:
            raise _fail(
                "Max nights must be greater than or equal to min nights", "max_nights"
            )

    def _item_to_package(self, item: dict[str, Any]) -> Package:
        min_nights = max(1, int(item.get("min_nights", 1)))
        multiplier = float(item.get("multiplier", 1.0))
        base_rate = item.get("base_rate")
        return Package(
            package_id=item["package_id"],
            post_id=item.get("post_id"),
            name=item.get("name") or item["package_id"],
            description=item.get("description", ""),
            category=PackageCategory(item.get("category", PackageCategory.STANDARD.value)),
            multiplier=min(MAX_MULTIPLIER, max(MIN_MULTIPLIER, multiplier)),
            min_nights=min_nights,
            max_nights=max(min_nights, int(item.get("max_nights", 7))),
            base_rate=float(base_rate) if base_rate is not None else None,
            catalog_id=item.get("catalog_id"),
            entitlement=Entitlement(item.get("entitlement", Entitlement.STANDARD.value)),
            is_enabled=bool(item.get("is_enabled", True)),
            features=[str(f) for f in item.get("features", [])],
            source=PackageSource.DATABASE,
        )


def _with_custom_name(package: Package, post: Post | None) -> Package:
    custom = post.custom_name_for(package.package_id) if post else None
    return package.model_copy(update={"name": custom}) if custom else package


# A strategy returns the matched package and how it matched, or None
Strategy = Callable[[str, str, Post | None], tuple[Package, MatchStrategy] | None]


class PackageResolver:
    """Resolves a requested package identifier for a post.

    Strategies run in order and the first match wins:

    1. candidates: enabled database packages plus catalog products, matched
       on id or catalog id, ignoring case
    2. direct database lookup by id, owned by the post
    3. exact name match among the post's enabled packages
    4. catalog lookup by id

    Packages the host disabled for the post are skipped by every strategy.
    """

    def __init__(self, packages: PackageService, posts: "PostService") -> None:
        self.packages = packages
        self.posts = posts
        self.strategies: list[Strategy] = [
            self._match_candidates,
            self._match_database_id,
            self._match_database_name,
            self._match_catalog_id,
        ]

    def resolve(self, post_id: str, requested: str) -> PackageResolution:
        """Resolve ``requested`` for ``post_id``.

        Raises:
            NotFoundError: PACKAGE_NOT_FOUND when no strategy matches
        """
        post = self._load_post(post_id)

        for strategy in self.strategies:
            match = strategy(post_id, requested, post)
            if match is None:
                continue
            package, how = match
            setting = post.setting_for(package.package_id) if post else None
            custom = post.custom_name_for(package.package_id) if post else None
            logger.info(
                "Package resolved",
                extra={
                    "post_id": post_id,
                    "requested": requested,
                    "package_id": package.package_id,
                    "strategy": how.value,
                    "source": package.source.value,
                },
            )
            return PackageResolution(
                package=package,
                strategy=how,
                display_name=custom or package.name or package.package_id,
                setting=setting,
            )

        logger.warning(
            "Package not resolved",
            extra={"post_id": post_id, "requested": requested},
        )
        raise NotFoundError(
            ErrorCode.PACKAGE_NOT_FOUND,
            details=(
                f"Package {requested} not found in database or RevenueCat "
                f"products for post {post_id}"
            ),
        )

    def _load_post(self, post_id: str) -> Post | None:
        try:
            return self.posts.get_post(post_id)
        except ClientError as e:
            logger.warning(
                "Post lookup failed during package resolution",
                extra={"post_id": post_id, "error": str(e)},
            )
            return None

    @staticmethod
    def _disabled(package: Package, post: Post | None) -> bool:
        return post is not None and post.is_package_disabled(package.package_id)

    def _enabled_database_packages(self, post_id: str, post: Post | None) -> list[Package]:
        return [
            p
            for p in self.packages.list_packages(post_id)
            if p.is_enabled and not self._disabled(p, post)
        ]

    def _match_candidates(
        self, post_id: str, requested: str, post: Post | None
    ) -> tuple[Package, MatchStrategy] | None:
        candidates = self._enabled_database_packages(post_id, post) + [
            p for p in catalog_packages() if not self._disabled(p, post)
        ]
        for package in candidates:
            how = package.matches(requested)
            if how is not None:
                return package, how
        return None

    def _match_database_id(
        self, post_id: str, requested: str, post: Post | None
    ) -> tuple[Package, MatchStrategy] | None:
        package = self.packages.get_package(requested)
        if package is None or package.post_id != post_id or self._disabled(package, post):
            return None
        return package, MatchStrategy.DATABASE_ID

    def _match_database_name(
        self, post_id: str, requested: str, post: Post | None
    ) -> tuple[Package, MatchStrategy] | None:
        for package in self._enabled_database_packages(post_id, post):
            if package.name == requested:
                return package, MatchStrategy.DATABASE_NAME
        return None

    def _match_catalog_id(
        self, post_id: str, requested: str, post: Post | None
    ) -> tuple[Package, MatchStrategy] | None:
        product = find_product(requested)
        if product is None:
            return None
        package = product_to_package(product)
        if self._disabled(package, post):
            return None
        return package, MatchStrategy.CATALOG_ID
