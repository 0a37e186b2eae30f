"""Schema baselines shared by request and response DTOs."""

from pydantic import BaseModel, ConfigDict


class StrictRequestModel(BaseModel):
    """Request DTO base that always forbids unexpected fields."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class ResponseModel(BaseModel):
    """Response DTO base readable straight from ORM objects."""

    model_config = ConfigDict(from_attributes=True)
