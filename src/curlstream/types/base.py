"""Reusable, strict base models for typed configuration."""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict


class StrictBaseModel(BaseModel):
    """A strict, immutable pydantic base model."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        strict=True,
        validate_default=True,
    )

    def copy(self: Self, **kwargs: Any) -> Self:
        """Create a copy of the model with the updated fields that are validated."""
        return self.__class__(**(self.model_dump(exclude_unset=True) | kwargs))
