import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from starlette.testclient import TestClient

from app.app import create_app
from remix.clients import graph_client_factory
from remix.errors import SchemaError, UpstreamError
from remix.generation import GenerationService
from remix.messaging import DeliveryService
from conftest import IMAGE_DATA_URL, PNG_BYTES, FakeDeliverer, FakeGenerator


def remix_app(
    generator: Any = None,
    deliverer: Any = None,
) -> TestClient:
    app = create_app(
        generator=FakeGenerator() if generator is None else generator,
        deliverer=FakeDeliverer() if deliverer is None else deliverer,
    )
    return TestClient(app)


def openai_stub(output_text: str) -> MagicMock:
    client = MagicMock()
    client.responses.create = AsyncMock(
        return_value=MagicMock(output_text=output_text)
    )
    return client


def graph_service(status_code: int, body: Any, **kwargs: Any) -> DeliveryService:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=body)

    options: dict[str, Any] = {
        "access_token": "token-123",
        "phone_number_id": "1098765",
    }
    options.update(kwargs)
    return DeliveryService(
        http_client=graph_client_factory(
            "token-123", transport=httpx.MockTransport(handler)
        ),
        **options,
    )


def test_homepage() -> None:
    resp = remix_app().get("/")
    assert resp.status_code == 200
    assert "Kitchen Remix AI" in resp.text
    assert 'hx-post="/remix"' in resp.text


def test_assets() -> None:
    resp = remix_app().get("/assets/css/remix.css")
    assert resp.status_code == 200


def test_api_generate(payload: dict[str, Any], generator: FakeGenerator) -> None:
    client = remix_app(generator=generator)

    resp = client.post(
        "/api/generate", json={"imageDataUrl": IMAGE_DATA_URL, "notes": "vegan"}
    )

    assert resp.status_code == 200
    assert resp.json() == payload
    assert generator.calls == [{"image_data_url": IMAGE_DATA_URL, "notes": "vegan"}]


def test_api_generate_invalid_json() -> None:
    resp = remix_app().post(
        "/api/generate",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid JSON body."
    assert "details" in resp.json()


def test_api_generate_not_an_object() -> None:
    resp = remix_app().post("/api/generate", json=["data:image/png;base64,abc"])
    assert resp.status_code == 400
    assert resp.json()["error"] == "Request validation failed."


def test_api_generate_bad_image() -> None:
    stub = openai_stub("{}")
    client = remix_app(generator=GenerationService(openai_client=stub))

    resp = client.post(
        "/api/generate", json={"imageDataUrl": "data:text/plain;base64,aGk="}
    )

    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Request validation failed."
    assert body["details"][0]["loc"] == ["imageDataUrl"]
    stub.responses.create.assert_not_awaited()


def test_api_generate_without_api_key() -> None:
    client = remix_app(generator=GenerationService(api_key=None))

    resp = client.post("/api/generate", json={"imageDataUrl": IMAGE_DATA_URL})

    assert resp.status_code == 500
    assert resp.json() == {"error": "OPENAI_API_KEY is not set on the server."}


def test_api_generate_unusable_reply(payload: dict[str, Any]) -> None:
    payload["recipes"] = payload["recipes"][:1]
    stub = openai_stub(json.dumps(payload))
    client = remix_app(generator=GenerationService(openai_client=stub))

    resp = client.post("/api/generate", json={"imageDataUrl": IMAGE_DATA_URL})

    assert resp.status_code == 502
    assert "retake the photo" in resp.json()["error"]


def test_api_generate_end_to_end(payload: dict[str, Any]) -> None:
    stub = openai_stub(json.dumps(payload))
    client = remix_app(generator=GenerationService(openai_client=stub))

    resp = client.post("/api/generate", json={"imageDataUrl": IMAGE_DATA_URL})

    assert resp.status_code == 200
    assert resp.json() == payload


def test_api_whatsapp(deliverer: FakeDeliverer) -> None:
    client = remix_app(deliverer=deliverer)

    resp = client.post(
        "/api/whatsapp",
        json={"message": "Leftover ideas for tonight", "phoneNumber": "+14155551212"},
    )

    assert resp.status_code == 200
    assert resp.json() == {"status": "queued", "id": "wamid.1"}
    assert deliverer.calls == [
        {"message": "Leftover ideas for tonight", "recipient": "+14155551212"}
    ]


@pytest.mark.parametrize(
    "graph_body,expected",
    (
        ({"messages": [{"id": "wamid.9"}]}, {"status": "queued", "id": "wamid.9"}),
        ({}, {"status": "sent", "id": None}),
    ),
)
def test_api_whatsapp_end_to_end(graph_body: Any, expected: Any) -> None:
    client = remix_app(deliverer=graph_service(200, graph_body))

    resp = client.post(
        "/api/whatsapp",
        json={"message": "Leftover ideas for tonight", "phoneNumber": "+14155551212"},
    )

    assert resp.json() == expected


@pytest.mark.parametrize(
    "service,body,status_code",
    (
        (
            {"access_token": None},
            {"message": "Leftover ideas for tonight", "phoneNumber": "+1415"},
            500,
        ),
        ({}, {"message": "Leftover ideas for tonight"}, 400),
        ({}, {"message": "short", "phoneNumber": "+1415"}, 400),
    ),
)
def test_api_whatsapp_errors(
    service: dict[str, Any], body: dict[str, Any], status_code: int
) -> None:
    client = remix_app(deliverer=graph_service(200, {}, **service))

    resp = client.post("/api/whatsapp", json=body)

    assert resp.status_code == status_code
    assert "error" in resp.json()


def test_api_whatsapp_upstream_error() -> None:
    error = {"error": {"message": "Recipient not in allowed list", "code": 131030}}
    client = remix_app(deliverer=graph_service(400, error))

    resp = client.post(
        "/api/whatsapp",
        json={"message": "Leftover ideas for tonight", "phoneNumber": "+1415"},
    )

    assert resp.status_code == 502
    body = resp.json()
    assert body["error"].startswith("WhatsApp API error (400): ")
    assert body["details"] == {"status": 400, "body": error}


def test_remix_page(generator: FakeGenerator) -> None:
    client = remix_app(generator=generator)

    resp = client.post(
        "/remix",
        data={"notes": " no oven "},
        files={"image": ("leftovers.png", PNG_BYTES, "image/png")},
    )

    assert resp.status_code == 200
    html = resp.text
    positions = [
        html.index("Recipe 1"),
        html.index("Quick Tomato Basil Pasta"),
        html.index("Recipe 2"),
        html.index("Leftover Rice Frittata"),
        html.index("Recipe 3"),
        html.index("Crispy Veg Fritters"),
    ]
    assert positions == sorted(positions)
    assert "Detected tomatoes, pasta, basil" in html
    assert "*1. Quick Tomato Basil Pasta*" in html
    assert "https://wa.me/?text=" in html
    assert generator.calls[0]["notes"] == "no oven"
    assert generator.calls[0]["image_data_url"].startswith("data:image/png;base64,")


def test_remix_page_rejects_other_files(generator: FakeGenerator) -> None:
    client = remix_app(generator=generator)

    resp = client.post(
        "/remix", files={"image": ("notes.txt", b"eggs, rice", "text/plain")}
    )

    assert "Please choose an image file." in resp.text
    assert generator.calls == []


def test_remix_page_without_photo(generator: FakeGenerator) -> None:
    client = remix_app(generator=generator)

    resp = client.post("/remix", data={"notes": "vegetarian"})

    assert "Upload a photo of your leftovers first." in resp.text
    assert generator.calls == []


def test_remix_page_generation_error() -> None:
    generator = FakeGenerator(
        error=SchemaError("Model response did not contain usable recipes.")
    )
    client = remix_app(generator=generator)

    resp = client.post(
        "/remix", files={"image": ("leftovers.png", PNG_BYTES, "image/png")}
    )

    assert resp.status_code == 200
    assert "Model response did not contain usable recipes." in resp.text
    assert "Recipe 1" not in resp.text


def test_remix_send(deliverer: FakeDeliverer) -> None:
    client = remix_app(deliverer=deliverer)

    resp = client.post(
        "/remix/send", data={"message": "Leftover ideas for tonight", "phone": " "}
    )

    assert "WhatsApp message queued successfully!" in resp.text
    assert deliverer.calls == [
        {"message": "Leftover ideas for tonight", "recipient": None}
    ]


def test_remix_send_error() -> None:
    deliverer = FakeDeliverer(error=UpstreamError("WhatsApp API error (401): {}"))
    client = remix_app(deliverer=deliverer)

    resp = client.post(
        "/remix/send",
        data={"message": "Leftover ideas for tonight", "phone": "+14155551212"},
    )

    assert "WhatsApp API error (401): {}" in resp.text
    assert deliverer.calls[0]["recipient"] == "+14155551212"
