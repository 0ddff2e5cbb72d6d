"""
Base schema for variant editing models.
"""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base for all schemas.

    Features:
        - Labels, SKUs and attribute values arrive trimmed
        - Field edits on a live draft are validated on assignment
        - Can be built from plain objects (from_attributes)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )
