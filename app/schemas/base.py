"""Base schemas with common patterns"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base schema: snake_case attributes, camelCase on the wire"""

    model_config = ConfigDict(
        from_attributes=True,
        validate_assignment=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class TimestampMixin(BaseSchema):
    """Mixin for timestamp fields"""
    created_at: datetime
    updated_at: Optional[datetime] = None


class MessageResponse(BaseSchema):
    """Plain acknowledgement"""
    message: str
