"""Pytest configuration and fixtures for Plek backend tests.

This module provides reusable fixtures for testing:
- DynamoDB mocking with moto (posts, packages, bookings, nights, estimates)
- A billing API stand-in built on httpx.MockTransport
- Service instances wired to the mocked tables
- A FastAPI TestClient with the billing client swapped in
"""

import os
from typing import Any, Generator

import boto3
import httpx
import pytest
from moto import mock_aws

# === Environment Setup ===

# Set environment variables for testing before imports
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-1")
os.environ.setdefault("DYNAMODB_TABLE_PREFIX", "test-plek")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("INVITE_TOKEN_SECRET", "test-invite-secret")
os.environ.setdefault("REVENUECAT_API_KEY", "test-billing-key")

# Only set fake credentials for moto if no real credentials are present
if not os.environ.get("AWS_PROFILE") and not os.environ.get("AWS_ACCESS_KEY_ID"):
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

TABLE_PREFIX = os.environ["DYNAMODB_TABLE_PREFIX"]
BILLING_API_URL = "https://billing.test/v1"

OWNER_ID = "user-owner-123"
GUEST_ID = "user-guest-456"
STRANGER_ID = "user-stranger-789"


# === Singleton Resets ===


@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None, None, None]:
    """Reset cached services and the catalog table around each test.

    Tests using mock_aws get fresh boto3 clients inside the mock context
    rather than reusing ones created for a previous test.
    """
    from plek_api.dependencies import reset_services
    from plek_shared.services.catalog import set_catalog_store

    reset_services()
    set_catalog_store(None)
    yield
    reset_services()
    set_catalog_store(None)


@pytest.fixture
def aws_credentials() -> None:
    """Mocked AWS Credentials for moto."""
    if not os.environ.get("AWS_PROFILE"):
        os.environ["AWS_ACCESS_KEY_ID"] = "testing"
        os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
        os.environ["AWS_SECURITY_TOKEN"] = "testing"
        os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "eu-west-1"


# === DynamoDB Fixtures ===


def _gsi(name: str, attribute: str) -> dict[str, Any]:
    return {
        "IndexName": name,
        "KeySchema": [{"AttributeName": attribute, "KeyType": "HASH"}],
        "Projection": {"ProjectionType": "ALL"},
    }


TABLES: list[dict[str, Any]] = [
    {
        "TableName": f"{TABLE_PREFIX}-posts",
        "KeySchema": [{"AttributeName": "post_id", "KeyType": "HASH"}],
        "AttributeDefinitions": [
            {"AttributeName": "post_id", "AttributeType": "S"},
            {"AttributeName": "slug", "AttributeType": "S"},
        ],
        "GlobalSecondaryIndexes": [_gsi("slug-index", "slug")],
        "BillingMode": "PAY_PER_REQUEST",
    },
    {
        "TableName": f"{TABLE_PREFIX}-packages",
        "KeySchema": [{"AttributeName": "package_id", "KeyType": "HASH"}],
        "AttributeDefinitions": [
            {"AttributeName": "package_id", "AttributeType": "S"},
            {"AttributeName": "post_id", "AttributeType": "S"},
        ],
        "GlobalSecondaryIndexes": [_gsi("post_id-index", "post_id")],
        "BillingMode": "PAY_PER_REQUEST",
    },
    {
        "TableName": f"{TABLE_PREFIX}-bookings",
        "KeySchema": [{"AttributeName": "booking_id", "KeyType": "HASH"}],
        "AttributeDefinitions": [
            {"AttributeName": "booking_id", "AttributeType": "S"},
            {"AttributeName": "post_id", "AttributeType": "S"},
            {"AttributeName": "customer_id", "AttributeType": "S"},
        ],
        "GlobalSecondaryIndexes": [
            _gsi("post_id-index", "post_id"),
            _gsi("customer_id-index", "customer_id"),
        ],
        "BillingMode": "PAY_PER_REQUEST",
    },
    {
        "TableName": f"{TABLE_PREFIX}-booking-nights",
        "KeySchema": [
            {"AttributeName": "post_id", "KeyType": "HASH"},
            {"AttributeName": "night", "KeyType": "RANGE"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": "post_id", "AttributeType": "S"},
            {"AttributeName": "night", "AttributeType": "S"},
        ],
        "BillingMode": "PAY_PER_REQUEST",
    },
    {
        "TableName": f"{TABLE_PREFIX}-estimates",
        "KeySchema": [{"AttributeName": "estimate_id", "KeyType": "HASH"}],
        "AttributeDefinitions": [
            {"AttributeName": "estimate_id", "AttributeType": "S"},
            {"AttributeName": "customer_id", "AttributeType": "S"},
        ],
        "GlobalSecondaryIndexes": [_gsi("customer_id-index", "customer_id")],
        "BillingMode": "PAY_PER_REQUEST",
    },
]


@pytest.fixture
def dynamodb_tables(aws_credentials: None) -> Generator[Any, None, None]:
    """Create all Plek tables inside a mock_aws context."""
    with mock_aws():
        client = boto3.client("dynamodb", region_name="eu-west-1")
        for table_config in TABLES:
            client.create_table(**table_config)
        yield client


@pytest.fixture
def db(dynamodb_tables: Any) -> Any:
    """DynamoDBService bound to the mocked tables."""
    from plek_shared.services.dynamodb import get_dynamodb_service

    return get_dynamodb_service()


# === Billing API Fixtures ===


@pytest.fixture
def billing() -> dict[str, Any]:
    """Mutable state behind the fake billing API.

    ``subscribers`` maps a user id to its entitlements object; users absent
    from it get a 404. User ids listed in ``failing`` get a 500.
    """
    return {"subscribers": {}, "failing": set(), "requests": []}


@pytest.fixture
def billing_transport(billing: dict[str, Any]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        billing["requests"].append(request)
        user_id = request.url.path.rsplit("/", 1)[-1]
        if user_id in billing["failing"]:
            return httpx.Response(500, json={"message": "Internal error"})
        entitlements = billing["subscribers"].get(user_id)
        if entitlements is None:
            return httpx.Response(404, json={"code": 7259, "message": "Subscriber not found"})
        return httpx.Response(
            200, json={"subscriber": {"original_app_user_id": user_id, "entitlements": entitlements}}
        )

    return httpx.MockTransport(handler)


@pytest.fixture
def subscription_service(billing_transport: httpx.MockTransport) -> Any:
    from plek_shared.services.subscription import SubscriptionService

    return SubscriptionService(
        api_url=BILLING_API_URL,
        api_key="test-billing-key",
        http_client=httpx.Client(transport=billing_transport),
    )


@pytest.fixture
def subscribe(billing: dict[str, Any]) -> Any:
    """Give a user a non-expiring entitlement."""

    def _subscribe(user_id: str, entitlement: str = "standard") -> None:
        billing["subscribers"].setdefault(user_id, {})[entitlement] = {
            "expires_date": None,
            "product_identifier": "weekly",
        }

    return _subscribe


# === Service Fixtures ===


@pytest.fixture
def post_service(db: Any) -> Any:
    from plek_shared.services.posts import PostService

    return PostService(db=db)


@pytest.fixture
def package_service(db: Any, post_service: Any) -> Any:
    from plek_shared.services.packages import PackageService

    return PackageService(db=db, posts=post_service)


@pytest.fixture
def resolver(package_service: Any, post_service: Any) -> Any:
    from plek_shared.services.packages import PackageResolver

    return PackageResolver(packages=package_service, posts=post_service)


@pytest.fixture
def availability_service(db: Any, post_service: Any, subscription_service: Any) -> Any:
    from plek_shared.services.availability import AvailabilityService

    return AvailabilityService(
        db=db, posts=post_service, subscriptions=subscription_service
    )


@pytest.fixture
def invite_token_service() -> Any:
    from plek_shared.services.invite_tokens import InviteTokenService

    return InviteTokenService(secret="test-invite-secret")


@pytest.fixture
def booking_service(
    db: Any, post_service: Any, availability_service: Any, invite_token_service: Any
) -> Any:
    from plek_shared.services.booking import BookingService

    return BookingService(
        db=db,
        posts=post_service,
        availability=availability_service,
        tokens=invite_token_service,
    )


@pytest.fixture
def estimate_service(
    db: Any, post_service: Any, resolver: Any, booking_service: Any
) -> Any:
    from plek_shared.services.estimates import EstimateService

    return EstimateService(
        db=db, posts=post_service, resolver=resolver, bookings=booking_service
    )


# === Sample Data Fixtures ===


@pytest.fixture
def sample_post(post_service: Any) -> Any:
    """A post at the default base rate (150)."""
    return post_service.create_post(title="Lakeside Cabin", slug="lakeside-cabin")


@pytest.fixture
def weekend_package(package_service: Any, sample_post: Any) -> Any:
    """Database package: 2-5 nights at 0.9x, mapped to the weekly product."""
    return package_service.create_package(
        sample_post.post_id,
        {
            "name": "Weekend Deal",
            "multiplier": 0.9,
            "min_nights": 2,
            "max_nights": 5,
            "catalog_id": "weekly_customer",
        },
    )


# === API Fixtures ===


@pytest.fixture
def client(
    dynamodb_tables: Any,
    subscription_service: Any,
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[Any, None, None]:
    """TestClient with the billing client replaced by the mock transport.

    The route dependency is overridden and the module-level factory is
    patched so cached services built from it pick up the same instance.
    """
    from fastapi.testclient import TestClient

    from plek_api import dependencies
    from plek_api.main import app

    original = dependencies.get_subscription_service
    monkeypatch.setattr(dependencies, "get_subscription_service", lambda: subscription_service)
    app.dependency_overrides[original] = lambda: subscription_service

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def auth() -> Any:
    """Headers the API gateway forwards for an authenticated user."""

    def _auth(user_id: str = OWNER_ID) -> dict[str, str]:
        return {"x-user-sub": user_id}

    return _auth
