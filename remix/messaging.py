"""Sends text messages through the WhatsApp Cloud API."""

import json
import logging
from typing import Any

import httpx

from remix.clients import GRAPH_API_VERSION, graph_client_factory
from remix.errors import ConfigError, UpstreamError, ValidationError
from remix.models import DeliveryOutcome, DeliveryRequest, parse_request


logger = logging.getLogger(__name__)


def _json_or_empty(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return {}


def text_message(recipient: str, body: str) -> dict[str, Any]:
    return {
        "messaging_product": "whatsapp",
        "to": recipient,
        "type": "text",
        "text": {
            "preview_url": False,
            "body": body,
        },
    }


def outcome_from_body(body: Any) -> DeliveryOutcome:
    """Queued when the api hands back message ids, otherwise sent."""
    messages = body.get("messages") if isinstance(body, dict) else None
    if messages is None:
        return DeliveryOutcome(state="sent")

    id = None
    if isinstance(messages, list) and messages and isinstance(messages[0], dict):
        id = messages[0].get("id")
    return DeliveryOutcome(state="queued", id=id)


class DeliveryService:
    def __init__(
        self,
        *,
        access_token: str | None = None,
        phone_number_id: str | None = None,
        default_recipient: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        api_version: str = GRAPH_API_VERSION,
    ) -> None:
        self.access_token = access_token
        self.phone_number_id = phone_number_id
        self.default_recipient = default_recipient
        self.api_version = api_version
        self._http_client = http_client

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            assert self.access_token
            self._http_client = graph_client_factory(
                self.access_token, version=self.api_version
            )
        return self._http_client

    def resolve_recipient(self, recipient: str | None) -> str:
        if recipient and recipient.strip():
            return recipient
        if self.default_recipient:
            return self.default_recipient
        raise ValidationError(
            "Provide a phoneNumber in the request or configure WHATSAPP_RECIPIENT."
        )

    async def deliver(
        self,
        message: str,
        recipient: str | None = None,
    ) -> DeliveryOutcome:
        if not (self.access_token and self.phone_number_id):
            raise ConfigError(
                "WhatsApp credentials are not configured. "
                "Set WHATSAPP_ACCESS_TOKEN and WHATSAPP_PHONE_NUMBER_ID."
            )

        request = parse_request(
            DeliveryRequest, {"message": message, "phoneNumber": recipient}
        )
        to = self.resolve_recipient(request.recipient)

        try:
            resp = await self.http_client.post(
                f"{self.phone_number_id}/messages",
                json=text_message(to, request.message),
            )
        except httpx.HTTPError as e:
            logger.error("WhatsApp send failed: %r", e)
            raise UpstreamError(f"WhatsApp API request failed. {e}") from e

        body = _json_or_empty(resp)
        if not resp.is_success:
            logger.error("WhatsApp send failed: %s %s", resp.status_code, body)
            raise UpstreamError(
                f"WhatsApp API error ({resp.status_code}): {json.dumps(body)}",
                details={"status": resp.status_code, "body": body},
            )

        outcome = outcome_from_body(body)
        logger.info("WhatsApp message %s (id=%s)", outcome.state, outcome.id)
        return outcome

    async def close(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
