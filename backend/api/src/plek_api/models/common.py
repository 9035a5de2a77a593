"""Shared API request/response models.

The web client speaks camelCase JSON; domain models use snake_case. API
models derive from ``CamelModel`` and are built from domain models with
``Model.model_validate(domain.model_dump())``.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Re-export the standard error body
from plek_shared.models.errors import ErrorCode, ErrorResponse

__all__ = [
    "CamelModel",
    "ErrorCode",
    "ErrorResponse",
    "SuccessMessage",
]


class CamelModel(BaseModel):
    """Base for API models: camelCase on the wire, snake_case in Python.

    Lenient so ISO strings from JSON coerce to dates.
    """

    model_config = ConfigDict(
        strict=False,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class SuccessMessage(CamelModel):
    """Acknowledgement for operations without a data payload."""

    success: bool = True
    message: str = Field(
        default="Operation completed successfully",
        description="Human-readable success message",
    )
