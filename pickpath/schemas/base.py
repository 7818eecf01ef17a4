"""
Base Schema Classes for Pydantic Models

This module provides base classes that handle common patterns like UUID
serialization and camelCase output, ensuring consistency across all
result schemas.

RULE: Calculation results inherit from CamelSchema and are exported with
model_dump(by_alias=True); ORM-backed responses inherit from
BaseResponseSchema.
"""

from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelSchema(BaseModel):
    """
    Base class for calculation results.

    Fields are declared in snake_case and serialised in camelCase:

        class StaffingResult(CamelSchema):
            required_headcount: int   # -> "requiredHeadcount"
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class BaseResponseSchema(CamelSchema):
    """
    Base class for response schemas that read from ORM models.

    Features:
    - Enables from_attributes for ORM compatibility
    - Serialises UUIDs as strings and datetimes as ISO 8601
    """
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        json_encoders={
            UUID: str,
            datetime: lambda v: v.isoformat() if v else None,
        },
        populate_by_name=True,
    )


class BaseCreateSchema(BaseModel):
    """
    Base class for create/input schemas.

    Accepts snake_case or camelCase keys; unknown keys are ignored.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='ignore',
    )


class BaseUpdateSchema(BaseCreateSchema):
    """
    Base class for update/patch schemas.

    All fields are optional by default for partial updates.
    """
    pass

