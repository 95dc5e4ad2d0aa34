"""
Base Schema Classes for Pydantic Models

RULE: All response schemas that read from ORM objects (``from_attributes=True``)
MUST inherit from BaseResponseSchema.
"""

from pydantic import BaseModel, ConfigDict


class BaseResponseSchema(BaseModel):
    """
    Base class for response schemas built from ORM models.

    Usage:
        class PromotionResponse(BaseResponseSchema):
            id: int
            name: str
    """
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class BaseCreateSchema(BaseModel):
    """
    Base class for create/input schemas.

    Fields are kept loosely typed where the services own validation, so that
    rule violations come back as typed business errors with their own
    messages instead of generic 422 responses.
    """
    model_config = ConfigDict(
        # Allow extra fields to be ignored (forward compatibility)
        extra='ignore',
    )


class MessageResponse(BaseModel):
    """Plain acknowledgement."""
    message: str
