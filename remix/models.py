"""Schemas for everything that crosses a service boundary.

The model reply is untrusted so `GenerationResult` is the contract it is held
to. Request models carry the wire names (`imageDataUrl`, `phoneNumber`) as
aliases.
"""

import json
from typing import Annotated, Any, Literal, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from remix.errors import SchemaError, ValidationError


IMAGE_DATA_URL_PATTERN = r"^data:image/[a-zA-Z+]+;base64,"


Ingredient = Annotated[str, Field(min_length=2)]
Step = Annotated[str, Field(min_length=5)]


class Recipe(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=3)
    description: str = Field(min_length=10)
    ingredients: tuple[Ingredient, ...] = Field(min_length=3)
    steps: tuple[Step, ...] = Field(min_length=3)


class GenerationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    summary: str = Field(min_length=10)
    recipes: tuple[Recipe, ...] = Field(min_length=3, max_length=5)


class GenerateRequest(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    image_data_url: str = Field(
        alias="imageDataUrl",
        min_length=10,
        pattern=IMAGE_DATA_URL_PATTERN,
    )
    notes: str | None = None

    @field_validator("image_data_url")
    @classmethod
    def has_payload(cls, value: str) -> str:
        _, _, payload = value.partition(",")
        if not payload.strip():
            raise ValueError("Image payload missing.")
        return value


class DeliveryRequest(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    message: str = Field(min_length=10)
    recipient: str | None = Field(default=None, alias="phoneNumber")


class DeliveryOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: Literal["queued", "sent"]
    id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.state, "id": self.id}


def _errors(e: pydantic.ValidationError) -> list[dict[str, Any]]:
    # Round trip through json so `ctx` entries are serialisable.
    return json.loads(e.json(include_url=False))


M = TypeVar("M", bound=BaseModel)


def parse_request(model: type[M], data: Any) -> M:
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError("Request validation failed.", details=_errors(e)) from e


def parse_generation_result(data: Any) -> GenerationResult:
    try:
        return GenerationResult.model_validate(data)
    except pydantic.ValidationError as e:
        raise SchemaError(
            "Model response did not contain usable recipes. "
            "Please retake the photo and try again.",
            details=_errors(e),
        ) from e
