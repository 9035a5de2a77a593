"""Secrets for plek services.

The billing API key and the invite-token signing secret come from the
environment when set. Deployed functions leave those unset and read
SecureString parameters under ``/plek/{environment}/...`` instead.
"""

import logging
import os
from functools import lru_cache
from typing import ClassVar

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

REVENUECAT_KEY_PARAMETER = "/plek/{env}/revenuecat/secret_key"
INVITE_SECRET_PARAMETER = "/plek/{env}/invite/token_secret"


class SSMServiceError(Exception):
    """A secret could not be read from Parameter Store."""


class SSMService:
    """Decrypted parameter reads, memoized per process.

    Lambda containers are reused between invocations, so a secret is only
    fetched once per container unless ``use_cache=False`` is passed.
    """

    _instance: ClassVar["SSMService | None"] = None
    _cache: ClassVar[dict[str, str]] = {}

    def __init__(self) -> None:
        self._client = boto3.client("ssm")

    @classmethod
    def get_instance(cls) -> "SSMService":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None
        cls._cache.clear()

    def get_parameter(self, name: str, *, use_cache: bool = True) -> str:
        """Decrypted value of the parameter at ``name``.

        Raises:
            SSMServiceError: Missing parameter, no ssm:GetParameter grant,
                or any other AWS failure
        """
        if use_cache and name in self._cache:
            return self._cache[name]

        logger.info("Reading secret parameter", extra={"parameter": name})
        try:
            response = self._client.get_parameter(Name=name, WithDecryption=True)
        except ClientError as e:
            raise SSMServiceError(_describe_failure(name, e)) from e

        value: str = response["Parameter"]["Value"]
        self._cache[name] = value
        return value

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.debug("Secret cache emptied")


def _describe_failure(name: str, error: ClientError) -> str:
    code = error.response.get("Error", {}).get("Code", "Unknown")
    if code == "ParameterNotFound":
        return f"Secret parameter {name} not found"
    if code == "AccessDeniedException":
        return f"Secret parameter {name} is not readable by this role"
    return f"Secret parameter {name} unavailable ({code})"


@lru_cache(maxsize=1)
def get_ssm_service() -> SSMService:
    return SSMService.get_instance()


def resolve_secret(env_var: str, parameter_template: str) -> str:
    """``env_var`` if set, else the parameter for the current ENVIRONMENT.

    ``parameter_template`` holds an ``{env}`` placeholder, e.g.
    ``INVITE_SECRET_PARAMETER``.
    """
    value = os.getenv(env_var)
    if value:
        return value

    environment = os.getenv("ENVIRONMENT", "dev")
    return get_ssm_service().get_parameter(parameter_template.format(env=environment))
