"""Talks to a running Kitchen Remix server over http.

`RemixClient` can stand in for both services in a `RemixSession`.
"""

from typing import Any

import httpx
import pydantic

from remix.clients import remix_client_factory
from remix.errors import UpstreamError, error_for_status
from remix.models import DeliveryOutcome, GenerationResult, parse_generation_result


class RemixClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = (
            remix_client_factory(base_url) if http_client is None else http_client
        )

    async def _post(self, url: str, data: dict[str, Any], fallback: str) -> Any:
        try:
            resp = await self._client.post(url, json=data)
        except httpx.HTTPError as e:
            raise UpstreamError(f"{fallback} {e}") from e

        try:
            body = resp.json()
        except ValueError:
            body = {}

        if not resp.is_success:
            message = body.get("error") if isinstance(body, dict) else None
            details = body.get("details") if isinstance(body, dict) else None
            raise error_for_status(resp.status_code)(
                message or fallback, details=details
            )
        return body

    async def generate(
        self,
        image_data_url: str,
        notes: str | None = None,
    ) -> GenerationResult:
        data: dict[str, Any] = {"imageDataUrl": image_data_url}
        if notes:
            data["notes"] = notes
        body = await self._post("/api/generate", data, "Unable to generate recipes.")
        return parse_generation_result(body)

    async def deliver(
        self,
        message: str,
        recipient: str | None = None,
    ) -> DeliveryOutcome:
        data: dict[str, Any] = {"message": message}
        if recipient:
            data["phoneNumber"] = recipient
        body = await self._post(
            "/api/whatsapp", data, "Failed to send WhatsApp message."
        )
        try:
            return DeliveryOutcome(state=body["status"], id=body.get("id"))
        except (KeyError, TypeError, pydantic.ValidationError) as e:
            raise UpstreamError("Unexpected delivery response.", details=body) from e

    async def close(self) -> None:
        await self._client.aclose()
