"""Post endpoints.

A post is a listed place. Hosts control which packages it offers through
its package settings.
"""

import logging

from fastapi import APIRouter, Depends
from starlette.status import HTTP_201_CREATED

from plek_api.dependencies import get_post_service
from plek_api.models.common import ErrorResponse
from plek_api.models.posts import (
    PackageSettingModel,
    PackageSettingsUpdateRequest,
    PostCreateRequest,
    PostResponse,
)
from plek_api.security import get_current_user_id
from plek_shared.models import ErrorCode, NotFoundError, PackageSetting, Post
from plek_shared.services.posts import PostService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])


def _to_response(post: Post) -> PostResponse:
    return PostResponse.model_validate(post.model_dump())


def _to_settings(models: list[PackageSettingModel]) -> list[PackageSetting]:
    return [PackageSetting(**m.model_dump()) for m in models]


@router.post(
    "",
    summary="Create a post",
    description="`baseRate` defaults to 150 per night when omitted.",
    response_model=PostResponse,
    status_code=HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Empty title or slug in use"},
        401: {"model": ErrorResponse, "description": "Authentication required"},
    },
)
async def create_post(
    body: PostCreateRequest,
    user_id: str = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    logger.debug("Post create requested", extra={"user_id": user_id, "slug": body.slug})
    post = service.create_post(
        title=body.title,
        slug=body.slug,
        base_rate=body.base_rate,
        package_settings=_to_settings(body.package_settings),
    )
    return _to_response(post)


@router.get(
    "/{post_ref}",
    summary="Get a post",
    description="Look up a post by id or slug.",
    response_model=PostResponse,
    responses={404: {"model": ErrorResponse, "description": "Post not found"}},
)
async def get_post(
    post_ref: str,
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    return _to_response(service.resolve_post(post_ref))


@router.put(
    "/{post_id}/package-settings",
    summary="Replace package settings",
    description="""
Replace the post's package overrides.

- `enabled: false` hides a database package and blocks it in estimates
- `enabled: true` is required for a billing catalog product to be offered
- `customName` replaces the package name shown to guests
""",
    response_model=PostResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Authentication required"},
        404: {"model": ErrorResponse, "description": "Post not found"},
    },
)
async def update_package_settings(
    post_id: str,
    body: PackageSettingsUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    logger.debug("Package settings requested", extra={"user_id": user_id, "post_id": post_id})
    if service.get_post(post_id) is None:
        raise NotFoundError(ErrorCode.POST_NOT_FOUND)
    post = service.update_package_settings(post_id, _to_settings(body.package_settings))
    return _to_response(post)
