"""
Base schemas that provide common configuration and envelope shapes.
These are used as building blocks for the user and session schemas.
"""

from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field

class BaseSchema(BaseModel):
    """
    Base schema with common configuration for all schemas.

    Features:
    - Extra fields sent by the backend are ignored
    - Whitespace is stripped from strings
    - Wire names (camelCase, `_id`) and Python names are both accepted
    """

    model_config = ConfigDict(
        # Ignore extra fields
        extra="ignore",
        str_strip_whitespace=True,
        # Phone numbers and ids sometimes arrive as JSON numbers
        coerce_numbers_to_str=True,
        # Accept both alias and field name on input
        populate_by_name=True,
    )

class RecordSchema(BaseSchema):
    """
    Immutable schema for records handed out to views.
    Views read a copy and never mutate it; changes replace the whole record.
    """

    model_config = ConfigDict(frozen=True)

class ApiEnvelope(BaseSchema):
    """
    Standard `{success, data?, token?, error?}` envelope returned by the API.
    """
    success: bool = Field(False, description="Whether the backend accepted the request")
    data: Optional[Any] = Field(None, description="Payload, shape depends on the endpoint")
    token: Optional[str] = Field(None, description="Bearer token (login only)")
    error: Optional[str] = Field(None, description="Human-readable error message")
