"""Client side orchestration. What the page (or the cli) does with a photo."""

import base64
import logging
from typing import Callable, Protocol

from remix.errors import RemixError, ValidationError
from remix.models import DeliveryOutcome, GenerationResult, Recipe
from remix.state import ActionInProgress, ActionState
from remix.transcript import build_transcript, share_link


logger = logging.getLogger(__name__)


class Generator(Protocol):
    async def generate(
        self, image_data_url: str, notes: str | None = None
    ) -> GenerationResult:
        ...


class Deliverer(Protocol):
    async def deliver(
        self, message: str, recipient: str | None = None
    ) -> DeliveryOutcome:
        ...


def image_data_url(content: bytes, content_type: str) -> str:
    encoded = base64.b64encode(content).decode("utf-8")
    return f"data:{content_type};base64,{encoded}"


class RemixSession:
    def __init__(self, *, generator: Generator, deliverer: Deliverer) -> None:
        self.generator = generator
        self.deliverer = deliverer
        self.image_data_url: str | None = None
        self.generation: ActionState[GenerationResult] = ActionState.idle()
        self.delivery: ActionState[DeliveryOutcome] = ActionState.idle()
        self.error: str | None = None
        self.notice: str | None = None

    def select_image(self, content: bytes, content_type: str | None) -> None:
        if not content:
            self.image_data_url = None
            return
        if not (content_type or "").startswith("image/"):
            self.error = "Please choose an image file."
            raise ValidationError(self.error)
        self.image_data_url = image_data_url(content, content_type or "")

    @property
    def result(self) -> GenerationResult | None:
        return self.generation.result

    @property
    def recipes(self) -> tuple[Recipe, ...]:
        return self.result.recipes if self.result else ()

    @property
    def summary(self) -> str | None:
        return self.result.summary if self.result else None

    @property
    def transcript(self) -> str:
        return build_transcript(self.recipes, self.summary)

    def _begin(self, state: ActionState) -> None:
        if state.is_pending:
            raise ActionInProgress("Wait for the current request to finish.")
        self.error = None

    async def submit(self, notes: str = "") -> ActionState[GenerationResult]:
        self._begin(self.generation)
        if not self.image_data_url:
            self.error = "Upload a photo of your leftovers first."
            return self.generation

        self.generation = ActionState.pending()
        self.notice = None
        try:
            result = await self.generator.generate(self.image_data_url, notes.strip())
        except RemixError as e:
            self.error = e.message
            self.generation = ActionState.failed(e.message)
        else:
            self.generation = ActionState.succeeded(result)
        return self.generation

    async def send(
        self,
        phone_number: str = "",
        *,
        message: str | None = None,
    ) -> ActionState[DeliveryOutcome]:
        """Send the transcript, or an already rendered copy of it."""
        message = self.transcript if message is None else message.strip()
        if not message:
            return self.delivery

        self._begin(self.delivery)
        self.delivery = ActionState.pending()
        self.notice = None
        try:
            outcome = await self.deliverer.deliver(
                message, phone_number.strip() or None
            )
        except RemixError as e:
            self.error = e.message
            self.delivery = ActionState.failed(e.message)
        else:
            self.delivery = ActionState.succeeded(outcome)
            self.notice = (
                "WhatsApp message queued successfully!"
                if outcome.state == "queued"
                else "WhatsApp message sent."
            )
        return self.delivery

    def copy(self, clipboard: Callable[[str], None]) -> None:
        message = self.transcript
        if not message:
            return

        self.error = None
        try:
            clipboard(message)
        except Exception:
            logger.exception("Clipboard write failed")
            self.error = "Unable to copy recipes to clipboard."
        else:
            self.notice = "Copied recipes to clipboard."

    def share_link(self) -> str | None:
        message = self.transcript
        return share_link(message) if message else None
