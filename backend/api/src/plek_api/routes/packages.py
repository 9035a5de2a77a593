"""Package endpoints.

Database packages are managed per post. Billing catalog products are
read-only and appear in a post's package list only when its settings
enable them.
"""

import datetime as dt
import logging

from fastapi import APIRouter, Depends, Query
from starlette.status import HTTP_201_CREATED

from plek_api.dependencies import get_package_service
from plek_api.models.common import ErrorResponse, SuccessMessage
from plek_api.models.packages import (
    CatalogProductListResponse,
    CatalogProductResponse,
    PackageCreateRequest,
    PackageListResponse,
    PackageResponse,
    PackageSuggestionResponse,
    PackageUpdateRequest,
)
from plek_api.security import get_current_user_id
from plek_shared.models import Package
from plek_shared.services.packages import PackageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/packages", tags=["packages"])


def _to_response(package: Package) -> PackageResponse:
    return PackageResponse.model_validate(package.model_dump())


@router.post(
    "",
    summary="Create a package",
    description="""
Create a database package for a post.

**Validation:**
- `name` is required and cannot be blank
- `multiplier` must be between 0.1 and 3.0 (default 1.0)
- `minNights` and `maxNights` must be at least 1, with max >= min
- `baseRate`, when given, must not be negative
""",
    response_model=PackageResponse,
    status_code=HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid package fields"},
        401: {"model": ErrorResponse, "description": "Authentication required"},
        404: {"model": ErrorResponse, "description": "Post not found"},
    },
)
async def create_package(
    body: PackageCreateRequest,
    user_id: str = Depends(get_current_user_id),
    service: PackageService = Depends(get_package_service),
) -> PackageResponse:
    logger.debug("Package create requested", extra={"user_id": user_id, "post_id": body.post_id})
    return _to_response(service.create_package(body.post_id, body.changes()))


@router.get(
    "/available-products",
    summary="Billing catalog",
    description="Every product offered through the billing provider.",
    response_model=CatalogProductListResponse,
)
async def list_available_products(
    service: PackageService = Depends(get_package_service),
) -> CatalogProductListResponse:
    products = [
        CatalogProductResponse.model_validate({**p.model_dump(), "nights": p.nights})
        for p in service.available_products()
    ]
    return CatalogProductListResponse(products=products, total=len(products))


@router.get(
    "/suggest",
    summary="Suggest a package for a stay",
    description="""
Pick the package that best fits the requested nights.

The first offered package whose night range contains the stay wins;
otherwise the one whose minimum is closest. `package` is null when the post
offers nothing.
""",
    response_model=PackageSuggestionResponse,
)
async def suggest_package(
    post_id: str = Query(..., alias="postId"),
    from_date: dt.date = Query(..., alias="fromDate"),
    to_date: dt.date = Query(..., alias="toDate"),
    service: PackageService = Depends(get_package_service),
) -> PackageSuggestionResponse:
    package, duration = service.suggest_for_stay(post_id, from_date, to_date)
    return PackageSuggestionResponse(
        duration=duration,
        package=_to_response(package) if package else None,
    )


@router.get(
    "/post/{post_id}",
    summary="Packages offered by a post",
    description="""
Enabled database packages plus catalog products the post has switched on.
Custom names from the post's settings replace the package names.
""",
    response_model=PackageListResponse,
)
async def list_packages_for_post(
    post_id: str,
    service: PackageService = Depends(get_package_service),
) -> PackageListResponse:
    packages = [_to_response(p) for p in service.list_packages_for_post(post_id)]
    return PackageListResponse(packages=packages, total=len(packages))


@router.get(
    "/{package_id}",
    summary="Get a package",
    response_model=PackageResponse,
    responses={404: {"model": ErrorResponse, "description": "Package not found"}},
)
async def get_package(
    package_id: str,
    service: PackageService = Depends(get_package_service),
) -> PackageResponse:
    return _to_response(service.require_package(package_id))


@router.patch(
    "/{package_id}",
    summary="Update a package",
    description="Only the fields sent are changed. Send null to clear `baseRate` or `catalogId`.",
    response_model=PackageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid package fields"},
        401: {"model": ErrorResponse, "description": "Authentication required"},
        404: {"model": ErrorResponse, "description": "Package not found"},
    },
)
async def update_package(
    package_id: str,
    body: PackageUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    service: PackageService = Depends(get_package_service),
) -> PackageResponse:
    logger.debug("Package update requested", extra={"user_id": user_id, "package_id": package_id})
    return _to_response(service.update_package(package_id, body.changes()))


@router.delete(
    "/{package_id}",
    summary="Delete a package",
    response_model=SuccessMessage,
    responses={
        401: {"model": ErrorResponse, "description": "Authentication required"},
        404: {"model": ErrorResponse, "description": "Package not found"},
    },
)
async def delete_package(
    package_id: str,
    user_id: str = Depends(get_current_user_id),
    service: PackageService = Depends(get_package_service),
) -> SuccessMessage:
    logger.debug("Package delete requested", extra={"user_id": user_id, "package_id": package_id})
    service.delete_package(package_id)
    return SuccessMessage(message="Package deleted")
