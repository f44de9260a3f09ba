"""CLI for Kitchen Remix."""

import argparse
import asyncio
import mimetypes
from pathlib import Path
import sys

from rich.console import Console

from app import config
from remix.client import RemixClient
from remix.errors import ValidationError
from remix.generation import GenerationService
from remix.messaging import DeliveryService
from remix.session import Deliverer, Generator, RemixSession


console = Console()


def build_services(
    cfg: config.Config, url: str | None
) -> tuple[Generator, Deliverer, list]:
    if url:
        client = RemixClient(url)
        return client, client, [client]

    generator = GenerationService(
        api_key=cfg.openai_api_key,
        model=cfg.openai_model,
        max_output_tokens=cfg.max_output_tokens,
    )
    deliverer = DeliveryService(
        access_token=cfg.whatsapp_access_token,
        phone_number_id=cfg.whatsapp_phone_number_id,
        default_recipient=cfg.whatsapp_recipient,
        api_version=cfg.whatsapp_api_version,
    )
    return generator, deliverer, [generator, deliverer]


async def remix_photo(
    session: RemixSession,
    photo: Path,
    *,
    notes: str = "",
    send_to: str | None = None,
    share: bool = False,
) -> int:
    content_type, _ = mimetypes.guess_type(photo.name)
    try:
        session.select_image(photo.read_bytes(), content_type)
    except ValidationError as e:
        console.print(e.message, style="red", markup=False)
        return 1

    await session.submit(notes)
    if session.error:
        console.print(session.error, style="red", markup=False)
        return 1

    console.print(session.transcript, markup=False, highlight=False, soft_wrap=True)

    if send_to is not None:
        await session.send(send_to)
        if session.error:
            console.print(session.error, style="red", markup=False)
            return 1
        console.print(session.notice, style="green", markup=False)

    if share:
        console.print(
            session.share_link(), markup=False, highlight=False, soft_wrap=True
        )

    return 0


async def run(args: argparse.Namespace) -> int:
    cfg = config.Config()
    config.configure_logging(cfg.log_level)

    generator, deliverer, closeables = build_services(cfg, args.url)
    session = RemixSession(generator=generator, deliverer=deliverer)
    try:
        return await remix_photo(
            session,
            args.photo,
            notes=args.notes,
            send_to=args.send,
            share=args.share,
        )
    finally:
        for service in closeables:
            await service.close()


def main():
    parser = argparse.ArgumentParser(description="Kitchen Remix CLI")
    parser.add_argument("photo", type=Path, help="Photo of your leftovers")
    parser.add_argument("--notes", default="", help="Dietary needs, staples, kit")
    parser.add_argument(
        "--send",
        metavar="PHONE",
        nargs="?",
        const="",
        help="Send the recipes to WhatsApp (default recipient if no number)",
    )
    parser.add_argument(
        "--share", action="store_true", help="Print a WhatsApp share link"
    )
    parser.add_argument(
        "--url", help="Use a running Kitchen Remix server instead of the apis"
    )

    args = parser.parse_args()

    if not args.photo.is_file():
        console.print(f"Error: {args.photo} is not a file.", markup=False)
        sys.exit(1)

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
