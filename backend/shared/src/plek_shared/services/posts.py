"""Post service for listings and their per-post package settings."""

import datetime as dt
import uuid
from typing import TYPE_CHECKING, Any

from botocore.exceptions import ClientError

from plek_shared.models import (
    ErrorCode,
    NotFoundError,
    PackageSetting,
    Post,
    ValidationError,
)
from plek_shared.services.pricing import coerce_base_rate, get_default_base_rate
from plek_shared.utils.dates import parse_datetime
from plek_shared.utils.logging import get_logger

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService

logger = get_logger(__name__)


class PostService:
    """Service for reading and updating posts."""

    TABLE = "posts"
    SLUG_INDEX = "slug-index"

    def __init__(self, db: "DynamoDBService") -> None:
        self.db = db

    def get_post(self, post_id: str) -> Post | None:
        """Get a post by id.

        Args:
            post_id: Post primary key

        Returns:
            Post or None if not found
        """
        item = self.db.get_item(self.TABLE, {"post_id": post_id})
        if not item:
            return None
        return self._item_to_post(item)

    def get_post_by_slug(self, slug: str) -> Post | None:
        """Get a post by its URL slug."""
        items = self.db.query_by_gsi(
            table=self.TABLE,
            index_name=self.SLUG_INDEX,
            partition_key_name="slug",
            partition_key_value=slug,
        )
        return self._item_to_post(items[0]) if items else None

    def resolve_post(self, post_ref: str) -> Post:
        """Find a post by id, then by slug.

        Raises:
            NotFoundError: If neither lookup finds a post
        """
        if not post_ref:
            raise ValidationError(details="Post slug or ID is required")
        post = self.get_post(post_ref) or self.get_post_by_slug(post_ref)
        if post is None:
            raise NotFoundError(
                ErrorCode.POST_NOT_FOUND,
                details=f"No post with id or slug '{post_ref}'",
            )
        return post

    def resolve_post_id(self, post_ref: str) -> str:
        return self.resolve_post(post_ref).post_id

    def get_base_rate(self, post_id: str) -> float:
        """Nightly base rate for a post.

        Falls back to the default rate when the post is missing or the
        lookup fails, so pricing keeps working.
        """
        try:
            post = self.get_post(post_id)
        except ClientError as e:
            logger.warning(
                "Post lookup failed, using default base rate",
                extra={"post_id": post_id, "error": str(e)},
            )
            return get_default_base_rate()
        if post is None:
            return get_default_base_rate()
        return post.base_rate

    def create_post(
        self,
        title: str,
        slug: str | None = None,
        base_rate: float | None = None,
        package_settings: list[PackageSetting] | None = None,
    ) -> Post:
        """Create a post.

        Raises:
            ValidationError: If the title is empty or the slug is taken
        """
        if not title or not title.strip():
            raise ValidationError(details="Post title cannot be empty")
        if slug and self.get_post_by_slug(slug) is not None:
            raise ValidationError(details=f"Slug '{slug}' is already in use")

        now = dt.datetime.now(dt.UTC)
        post = Post(
            post_id=str(uuid.uuid4()),
            title=title.strip(),
            slug=slug,
            base_rate=coerce_base_rate(base_rate),
            package_settings=package_settings or [],
            created_at=now,
            updated_at=now,
        )
        self.db.put_item(
            self.TABLE,
            self._post_to_item(post),
            condition_expression="attribute_not_exists(post_id)",
        )
        logger.info("Post created", extra={"post_id": post.post_id})
        return post

    def update_package_settings(
        self, post_id: str, settings: list[PackageSetting]
    ) -> Post:
        """Replace the package settings of a post.

        Raises:
            NotFoundError: If the post does not exist
        """
        now = dt.datetime.now(dt.UTC)
        attrs = self.db.update_item(
            table=self.TABLE,
            key={"post_id": post_id},
            update_expression="SET package_settings = :settings, updated_at = :now",
            expression_attribute_values={
                ":settings": [s.model_dump(exclude_none=True) for s in settings],
                ":now": now.isoformat(),
            },
            condition_expression="attribute_exists(post_id)",
        )
        if attrs is None:
            raise NotFoundError(ErrorCode.POST_NOT_FOUND)
        logger.info(
            "Post package settings updated",
            extra={"post_id": post_id, "settings_count": len(settings)},
        )
        return self._item_to_post(attrs)

    def _post_to_item(self, post: Post) -> dict[str, Any]:
        return post.model_dump(mode="json", exclude_none=True)

    def _item_to_post(self, item: dict[str, Any]) -> Post:
        settings = [
            PackageSetting(
                package_id=str(s["package_id"]),
                enabled=bool(s.get("enabled", True)),
                custom_name=s.get("custom_name") or None,
            )
            for s in item.get("package_settings", [])
            if s.get("package_id")
        ]
        return Post(
            post_id=item["post_id"],
            title=item.get("title", ""),
            slug=item.get("slug"),
            base_rate=coerce_base_rate(item.get("base_rate")),
            package_settings=settings,
            created_at=parse_datetime(item.get("created_at")),
            updated_at=parse_datetime(item.get("updated_at")),
        )
