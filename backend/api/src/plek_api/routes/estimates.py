"""Estimate endpoints.

An estimate prices a stay before payment. Confirming a paid estimate
creates the booking.
"""

from fastapi import APIRouter, Depends, Query, Response
from starlette.status import HTTP_200_OK, HTTP_201_CREATED

from plek_api.dependencies import get_estimate_service
from plek_api.models.bookings import BookingResponse
from plek_api.models.common import ErrorResponse
from plek_api.models.estimates import (
    EstimateConfirmRequest,
    EstimateConfirmResponse,
    EstimateCreateRequest,
    EstimateResponse,
)
from plek_api.security import get_current_user_id
from plek_shared.models import Estimate, EstimateRequest
from plek_shared.services.estimates import EstimateService

router = APIRouter(prefix="/estimates", tags=["estimates"])


def _to_response(estimate: Estimate) -> EstimateResponse:
    return EstimateResponse.model_validate(estimate.model_dump())


@router.post(
    "",
    summary="Create or update an estimate",
    description="""
Price a stay for the caller.

`packageType` may be a package id, a billing catalog id or a package name.
Requesting the same post and dates again updates the unpaid estimate and
returns 200 instead of 201.

The total is `baseRate x nights x multiplier` unless the client sends one.
""",
    response_model=EstimateResponse,
    status_code=HTTP_201_CREATED,
    responses={
        200: {"model": EstimateResponse, "description": "Existing estimate updated"},
        400: {"model": ErrorResponse, "description": "Invalid range or unknown package"},
        401: {"model": ErrorResponse, "description": "Authentication required"},
    },
)
async def create_estimate(
    body: EstimateCreateRequest,
    response: Response,
    user_id: str = Depends(get_current_user_id),
    service: EstimateService = Depends(get_estimate_service),
) -> EstimateResponse:
    estimate, created = service.upsert_estimate(
        user_id, EstimateRequest.model_validate(body.model_dump())
    )
    if not created:
        response.status_code = HTTP_200_OK
    return _to_response(estimate)


@router.get(
    "/latest",
    summary="Latest estimate",
    description="The caller's most recent estimate, optionally for one post.",
    response_model=EstimateResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Authentication required"},
        404: {"model": ErrorResponse, "description": "No estimate found"},
    },
)
async def get_latest_estimate(
    post_id: str | None = Query(default=None, alias="postId"),
    slug: str | None = Query(default=None),
    user_id: str = Depends(get_current_user_id),
    service: EstimateService = Depends(get_estimate_service),
) -> EstimateResponse:
    return _to_response(service.get_latest_estimate(user_id, post_id or slug))


@router.get(
    "/{estimate_id}",
    summary="Get an estimate",
    response_model=EstimateResponse,
    responses={
        403: {"model": ErrorResponse, "description": "Not your estimate"},
        404: {"model": ErrorResponse, "description": "Estimate not found"},
    },
)
async def get_estimate(
    estimate_id: str,
    user_id: str = Depends(get_current_user_id),
    service: EstimateService = Depends(get_estimate_service),
) -> EstimateResponse:
    return _to_response(service.get_estimate(estimate_id, user_id))


@router.post(
    "/{estimate_id}/confirm",
    summary="Confirm a paid estimate",
    description="""
Create the booking for a paid estimate.

`paymentValidated` must be true. Confirming again returns the booking
created the first time.
""",
    response_model=EstimateConfirmResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Payment not validated or dates taken"},
        403: {"model": ErrorResponse, "description": "Not your estimate"},
        404: {"model": ErrorResponse, "description": "Estimate not found"},
    },
)
async def confirm_estimate(
    estimate_id: str,
    body: EstimateConfirmRequest,
    user_id: str = Depends(get_current_user_id),
    service: EstimateService = Depends(get_estimate_service),
) -> EstimateConfirmResponse:
    estimate, booking = service.confirm_estimate(
        estimate_id, user_id, body.payment_validated
    )
    return EstimateConfirmResponse(
        estimate=_to_response(estimate),
        booking=BookingResponse.model_validate(booking.model_dump()),
    )
