"""Base model for all sofle-build Pydantic models."""

from pydantic import BaseModel, ConfigDict


class SofleBaseModel(BaseModel):
    """Base model class for all sofle-build Pydantic models.

    Enum fields keep their enum type; assignments are validated so that
    services can update results in place.
    """

    model_config = ConfigDict(
        # Allow extra fields for flexibility
        extra="allow",
        # Strip whitespace from string fields
        str_strip_whitespace=True,
        # Validate assignment after model creation
        validate_assignment=True,
    )
