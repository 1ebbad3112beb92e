"""Product category schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CategoryCreate(BaseModel):
    code: str = Field(min_length=1, max_length=50, pattern=r"^[a-z0-9][a-z0-9_-]*$")
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=5000)

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class CategoryRead(BaseModel):
    id: int
    code: str
    name: str
    description: str | None = None
    active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CategoryUpdate(BaseModel):
    """Partial update; `active=False` hides the category and blocks new products."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    active: bool | None = None

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)
