"""Unit tests for SSM-backed secret resolution."""

from typing import Any, Generator

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from plek_shared.services.ssm_service import (
    INVITE_SECRET_PARAMETER,
    REVENUECAT_KEY_PARAMETER,
    SSMService,
    SSMServiceError,
    get_ssm_service,
    resolve_secret,
)


@pytest.fixture
def ssm_client(aws_credentials: None) -> Generator[Any, None, None]:
    with mock_aws():
        yield boto3.client("ssm", region_name="eu-west-1")


class TestSSMService:
    """Test suite for SSMService."""

    def test_reads_secure_string(self, ssm_client: Any) -> None:
        ssm_client.put_parameter(
            Name="/plek/test/invite/token_secret", Value="s3cret", Type="SecureString"
        )
        assert SSMService().get_parameter("/plek/test/invite/token_secret") == "s3cret"

    def test_missing_parameter_raises(self, ssm_client: Any) -> None:
        with pytest.raises(SSMServiceError, match="not found"):
            SSMService().get_parameter("/plek/test/missing")

    def test_values_are_cached(self, ssm_client: Any) -> None:
        ssm_client.put_parameter(Name="/plek/test/key", Value="v1", Type="SecureString")
        service = SSMService()
        assert service.get_parameter("/plek/test/key") == "v1"

        ssm_client.put_parameter(
            Name="/plek/test/key", Value="v2", Type="SecureString", Overwrite=True
        )
        assert service.get_parameter("/plek/test/key") == "v1"
        assert service.get_parameter("/plek/test/key", use_cache=False) == "v2"

    def test_shared_instance(self, ssm_client: Any) -> None:
        assert get_ssm_service() is get_ssm_service()

    def test_access_denied_names_parameter(
        self, ssm_client: Any, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        service = SSMService()
        denied = ClientError(
            {"Error": {"Code": "AccessDeniedException", "Message": "denied"}}, "GetParameter"
        )

        def _deny(**kwargs: Any) -> Any:
            raise denied

        monkeypatch.setattr(service._client, "get_parameter", _deny)

        with pytest.raises(SSMServiceError, match="not readable") as exc_info:
            service.get_parameter("/plek/test/locked")
        assert exc_info.value.__cause__ is denied


class TestResolveSecret:
    """Environment first, then SSM."""

    def test_environment_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INVITE_TOKEN_SECRET", "from-env")
        assert resolve_secret("INVITE_TOKEN_SECRET", INVITE_SECRET_PARAMETER) == "from-env"

    def test_falls_back_to_ssm(
        self, ssm_client: Any, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("REVENUECAT_API_KEY", raising=False)
        monkeypatch.setenv("ENVIRONMENT", "test")
        ssm_client.put_parameter(
            Name=REVENUECAT_KEY_PARAMETER.format(env="test"),
            Value="sk_from_ssm",
            Type="SecureString",
        )
        assert resolve_secret("REVENUECAT_API_KEY", REVENUECAT_KEY_PARAMETER) == "sk_from_ssm"

    def test_missing_everywhere_raises(
        self, ssm_client: Any, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("INVITE_TOKEN_SECRET", raising=False)
        with pytest.raises(SSMServiceError):
            resolve_secret("INVITE_TOKEN_SECRET", INVITE_SECRET_PARAMETER)
