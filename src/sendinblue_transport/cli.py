# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Command line tool sending a single mail through the transport.

Usage::

    sendinblue-send --apikey KEY --from me@example.com --to you@example.com \\
        --subject "Hello" --plain "Hi there"
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.markup import escape

from .config import TransportConfig, load_config
from .errors import SendinblueTransportError
from .mail import Mail, MailData, MailMessage
from .transport import SendinblueTransport

console = Console()


def _run_async(coro: Any) -> Any:
    """Run async coroutine in synchronous Click command context."""
    return asyncio.run(coro)


def _configure_logging() -> None:
    log_level = os.getenv("SIB_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.WARNING),
        format="[%(asctime)s] [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _resolve_config(
    apikey: str | None,
    config_path: str | None,
    sender_ip: str | None,
    api_url: str | None,
) -> TransportConfig:
    """Use --apikey when given, otherwise load_config(); options override either."""
    config = TransportConfig(api_key=apikey) if apikey else load_config(config_path)
    overrides = {"sender_ip": sender_ip, "api_url": api_url}
    return replace(config, **{k: v for k, v in overrides.items() if v})


@click.command(name="sendinblue-send")
@click.option("--apikey", envvar="SIB_API_KEY", help="Provider API key (default: from the config file).")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="INI file read when --apikey is not given (default: $SIB_CONFIG or sendinblue.ini).",
)
@click.option("--from", "from_", required=True, help="Sender address.")
@click.option("--to", multiple=True, required=True, help="Recipient address (repeatable).")
@click.option("--cc", multiple=True, help="CC address (repeatable).")
@click.option("--bcc", multiple=True, help="BCC address (repeatable).")
@click.option("--reply-to", "reply_to", help="Reply-To address.")
@click.option("--subject", required=True, help="Subject line.")
@click.option("--plain", required=True, help="Plain-text body.")
@click.option("--html", help="HTML body.")
@click.option(
    "--attach",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="File to attach (repeatable).",
)
@click.option("--sender-ip", envvar="SIB_SENDER_IP", help="Dedicated IP to send from.")
@click.option("--api-url", envvar="SIB_API_URL", help="Override the email-send endpoint.")
def main(
    apikey: str | None,
    config_path: str | None,
    from_: str,
    to: tuple[str, ...],
    cc: tuple[str, ...],
    bcc: tuple[str, ...],
    reply_to: str | None,
    subject: str,
    plain: str,
    html: str | None,
    attach: tuple[str, ...],
    sender_ip: str | None,
    api_url: str | None,
) -> None:
    """Send one mail and print its message id and envelope."""
    _configure_logging()

    try:
        config = _resolve_config(apikey, config_path, sender_ip, api_url)
    except ValueError as e:
        raise click.UsageError(str(e)) from e
    transport = SendinblueTransport(config)

    message = MailMessage(from_=from_, to=to, cc=cc, bcc=bcc, reply_to=reply_to)
    data = MailData(
        subject=subject,
        text=plain,
        html=html,
        attachments=[{"filename": Path(p).name, "path": p} for p in attach] or None,
    )

    try:
        result = _run_async(transport.send(Mail(message, data)))
    except SendinblueTransportError as e:
        console.print(f"[red]Mail Error:[/red] {escape(str(e))}")
        sys.exit(1)

    console.print(f"[green]Mail Completed[/green] {escape(result.message_id)}")
    envelope = result.envelope
    console.print(f"  From: {getattr(envelope, 'from_', None)}")
    console.print(f"  To:   {', '.join(getattr(envelope, 'to', []))}")


if __name__ == "__main__":
    main()
