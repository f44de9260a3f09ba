import httpx
import openai


OPENAI_TIMEOUT = 60 * 2
GRAPH_TIMEOUT = 30
GRAPH_API_VERSION = "v19.0"
GRAPH_BASE_URL = "https://graph.facebook.com/{version}/"


def openai_client_factory(token: str) -> openai.AsyncClient:
    # Failed calls are reported, never retried.
    return openai.AsyncClient(api_key=token, timeout=OPENAI_TIMEOUT, max_retries=0)


def graph_client_factory(
    token: str,
    *,
    version: str = GRAPH_API_VERSION,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=GRAPH_BASE_URL.format(version=version),
        headers={
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        },
        timeout=GRAPH_TIMEOUT,
        transport=transport,
    )


def remix_client_factory(
    base_url: str,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=base_url,
        headers={"Content-Type": "application/json"},
        timeout=OPENAI_TIMEOUT,
        transport=transport,
    )
