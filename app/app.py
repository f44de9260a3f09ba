import contextlib
import functools
import logging
from typing import Any, Awaitable, Callable

from jinja2 import Environment, FileSystemLoader, select_autoescape
from starlette.applications import Starlette
from starlette.datastructures import UploadFile
from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse
from starlette.routing import Mount, Route
from starlette.staticfiles import StaticFiles

from app import config
from app.html.remix_page import RemixPage
from remix.errors import RemixError, ValidationError
from remix.generation import GenerationService
from remix.messaging import DeliveryService
from remix.session import Deliverer, Generator, RemixSession


CONFIG = config.Config()
config.configure_logging(CONFIG.log_level)

logger = logging.getLogger(__name__)


TEMPLATES = Environment(
    loader=FileSystemLoader(CONFIG.html_dir),
    autoescape=select_autoescape(),
)


def aHTMLResponse(route: Callable[..., Awaitable[str | tuple[str, int]]]):
    @functools.wraps(route)
    async def wrapper(*args: Any, **kwargs: Any) -> HTMLResponse:
        resp = await route(*args, **kwargs)
        if not isinstance(resp, tuple):
            html, code = resp, 200
        else:
            html, code = resp
        return HTMLResponse(html, status_code=code)

    return wrapper


def session_for(request: Request) -> RemixSession:
    return RemixSession(
        generator=request.app.state.generator,
        deliverer=request.app.state.deliverer,
    )


async def json_object(request: Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except ValueError as e:
        raise ValidationError("Invalid JSON body.", details=str(e)) from e
    if not isinstance(body, dict):
        raise ValidationError(
            "Request validation failed.", details="Expected a JSON object."
        )
    return body


@aHTMLResponse
async def homepage(request: Request) -> str:
    return TEMPLATES.get_template("index.html").render()


@aHTMLResponse
async def remix_photo(request: Request) -> str:
    """Result fragment for a submitted photo."""
    session = session_for(request)
    async with request.form() as form:
        notes = str(form.get("notes", ""))
        image = form.get("image")
        content, content_type = b"", None
        if isinstance(image, UploadFile):
            # Read here, the upload is closed once the form is.
            content = await image.read()
            content_type = image.content_type

    try:
        session.select_image(content, content_type)
    except ValidationError as e:
        logger.info("Rejected upload: %s", e.message)
    else:
        await session.submit(notes)

    return RemixPage(session, environment=TEMPLATES).render()


@aHTMLResponse
async def remix_send(request: Request) -> str:
    """Delivery status fragment."""
    session = session_for(request)
    async with request.form() as form:
        message = str(form.get("message", ""))
        phone = str(form.get("phone", ""))

    await session.send(phone, message=message)
    return RemixPage(
        session, environment=TEMPLATES, template_name="delivery-status.html"
    ).render()


async def api_generate(request: Request) -> JSONResponse:
    body = await json_object(request)
    generator: Generator = request.app.state.generator
    result = await generator.generate(body.get("imageDataUrl"), body.get("notes"))
    return JSONResponse(result.model_dump(mode="json"))


async def api_whatsapp(request: Request) -> JSONResponse:
    body = await json_object(request)
    deliverer: Deliverer = request.app.state.deliverer
    outcome = await deliverer.deliver(body.get("message"), body.get("phoneNumber"))
    return JSONResponse(outcome.to_dict())


async def remix_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, RemixError)
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


@contextlib.asynccontextmanager
async def lifespan(app: Starlette):
    yield
    await app.state.generator.close()
    await app.state.deliverer.close()


def create_app(
    *,
    generator: Generator | None = None,
    deliverer: Deliverer | None = None,
) -> Starlette:
    app = Starlette(
        debug=True if CONFIG.env == config.Env.local else False,
        routes=[
            Route("/", homepage),
            Route("/remix", remix_photo, methods=["POST"]),
            Route("/remix/send", remix_send, methods=["POST"]),
            Route("/api/generate", api_generate, methods=["POST"]),
            Route("/api/whatsapp", api_whatsapp, methods=["POST"]),
            Mount("/assets", StaticFiles(directory=CONFIG.assets_dir)),
        ],
        exception_handlers={RemixError: remix_error},
        lifespan=lifespan,
    )

    app.state.generator = (
        GenerationService(
            api_key=CONFIG.openai_api_key,
            model=CONFIG.openai_model,
            max_output_tokens=CONFIG.max_output_tokens,
        )
        if generator is None
        else generator
    )
    app.state.deliverer = (
        DeliveryService(
            access_token=CONFIG.whatsapp_access_token,
            phone_number_id=CONFIG.whatsapp_phone_number_id,
            default_recipient=CONFIG.whatsapp_recipient,
            api_version=CONFIG.whatsapp_api_version,
        )
        if deliverer is None
        else deliverer
    )
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.app:app",
        host="0.0.0.0",
        port=8000,
        reload=CONFIG.env == config.Env.local,
    )
