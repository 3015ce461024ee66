"""
Base schemas for all Pydantic models.

UDF payloads use keys that are not valid Python identifiers (``nextTime``,
``exchange-traded``), so models populate by field name and serialise by alias.
"""

from pydantic import BaseModel, ConfigDict


class UDFSchema(BaseModel):
    """Base schema for UDF responses."""

    model_config = ConfigDict(populate_by_name=True)


class UDFErrorResponse(UDFSchema):
    """``{"s": "error", "errmsg": ...}`` body returned for any failed request."""

    s: str = "error"
    errmsg: str
