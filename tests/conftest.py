import copy
from typing import Any

import pytest

from remix.errors import RemixError
from remix.models import DeliveryOutcome, GenerationResult


# 1x1 transparent png.
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6364f8cf00000003010100c9fe92ef"
    "0000000049454e44ae426082"
)
IMAGE_DATA_URL = "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAAB"

PAYLOAD: dict[str, Any] = {
    "summary": "Detected tomatoes, pasta, basil",
    "recipes": [
        {
            "name": "Quick Tomato Basil Pasta",
            "description": "A fast weeknight pasta with fresh tomatoes.",
            "ingredients": ["200g pasta", "2 tomatoes", "basil"],
            "steps": ["Boil pasta", "Saute tomatoes", "Combine"],
        },
        {
            "name": "Leftover Rice Frittata",
            "description": "Eggs and leftover rice baked into a golden frittata.",
            "ingredients": ["4 eggs", "1 cup cooked rice", "Salt and pepper"],
            "steps": ["Whisk the eggs", "Fold in the rice", "Bake until set"],
        },
        {
            "name": "Crispy Veg Fritters",
            "description": "Grated leftover vegetables fried until crisp.",
            "ingredients": ["2 cups grated veg", "1 egg", "3 tbsp flour"],
            "steps": ["Mix everything together", "Shape into patties", "Fry until golden"],
        },
    ],
}


class FakeGenerator:
    def __init__(
        self,
        result: GenerationResult | None = None,
        error: RemixError | None = None,
    ) -> None:
        self.result = result
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def generate(
        self, image_data_url: str, notes: str | None = None
    ) -> GenerationResult:
        self.calls.append({"image_data_url": image_data_url, "notes": notes})
        if self.error is not None:
            raise self.error
        assert self.result is not None
        return self.result

    async def close(self) -> None:
        pass


class FakeDeliverer:
    def __init__(
        self,
        outcome: DeliveryOutcome | None = None,
        error: RemixError | None = None,
    ) -> None:
        self.outcome = DeliveryOutcome(state="sent") if outcome is None else outcome
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def deliver(
        self, message: str, recipient: str | None = None
    ) -> DeliveryOutcome:
        self.calls.append({"message": message, "recipient": recipient})
        if self.error is not None:
            raise self.error
        return self.outcome

    async def close(self) -> None:
        pass


@pytest.fixture
def payload() -> dict[str, Any]:
    return copy.deepcopy(PAYLOAD)


@pytest.fixture
def generation_result(payload: dict[str, Any]) -> GenerationResult:
    return GenerationResult.model_validate(payload)


@pytest.fixture
def generator(generation_result: GenerationResult) -> FakeGenerator:
    return FakeGenerator(result=generation_result)


@pytest.fixture
def deliverer() -> FakeDeliverer:
    return FakeDeliverer(outcome=DeliveryOutcome(state="queued", id="wamid.1"))
