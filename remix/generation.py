"""Recipes from a photo of leftovers."""

from enum import Enum
import json
import logging
from typing import Any

import openai

from remix.clients import openai_client_factory
from remix.errors import ConfigError, ParseError, UpstreamError
from remix.models import (
    GenerateRequest,
    GenerationResult,
    parse_generation_result,
    parse_request,
)
from remix.prompts import RemixPrompt


logger = logging.getLogger(__name__)


MAX_OUTPUT_TOKENS = 1400


class Model(Enum):
    GPT_4O_MINI = "gpt-4o-mini"
    GPT_4O = "gpt-4o"


def build_input(request: GenerateRequest) -> list[dict[str, Any]]:
    """A single user turn holding the instructions and the photo."""
    return [
        {
            "role": "user",
            "content": [
                {
                    "type": "input_text",
                    "text": str(RemixPrompt(request.notes)),
                },
                {
                    "type": "input_image",
                    "image_url": request.image_data_url,
                    "detail": "high",
                },
            ],
        }
    ]


class GenerationService:
    def __init__(
        self,
        *,
        api_key: str | None = None,
        openai_client: openai.AsyncClient | None = None,
        model: str = Model.GPT_4O_MINI.value,
        max_output_tokens: int = MAX_OUTPUT_TOKENS,
    ) -> None:
        self.api_key = api_key
        self._openai_client = openai_client
        self.model = model
        self.max_output_tokens = max_output_tokens

    @property
    def openai_client(self) -> openai.AsyncClient:
        if self._openai_client is None:
            if not self.api_key:
                raise ConfigError("OPENAI_API_KEY is not set on the server.")
            self._openai_client = openai_client_factory(self.api_key)
        return self._openai_client

    async def generate(
        self,
        image_data_url: str,
        notes: str | None = None,
    ) -> GenerationResult:
        client = self.openai_client
        request = parse_request(
            GenerateRequest, {"imageDataUrl": image_data_url, "notes": notes}
        )

        try:
            raw = await self._output_text(client, request)
            result = self._parse(raw)
        except UpstreamError as e:
            logger.error("Recipe generation failed: %s", e.message)
            raise

        logger.info("Generated %d recipes", len(result.recipes))
        return result

    async def _output_text(
        self,
        client: openai.AsyncClient,
        request: GenerateRequest,
    ) -> str:
        try:
            resp = await client.responses.create(
                model=self.model,
                max_output_tokens=self.max_output_tokens,
                input=build_input(request),  # pyright: ignore[reportArgumentType]
            )
        except openai.OpenAIError as e:
            raise UpstreamError(f"Model request failed. {e}") from e

        raw = (resp.output_text or "").strip()
        if not raw:
            raise UpstreamError("Model response was empty.")
        return raw

    def _parse(self, raw: str) -> GenerationResult:
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ParseError(
                "Model response was not valid JSON. "
                "Please retake the photo and try again."
            ) from e
        return parse_generation_result(payload)

    async def close(self) -> None:
        if self._openai_client is not None:
            await self._openai_client.close()
