# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Sendinblue transactional-email transport.

This module sends a :class:`Mail` through the provider's
``POST /v3/smtp/email`` endpoint. Each send builds the request body,
then performs exactly one HTTP request. There is no retry and no
connection reuse between sends.

Example:
    Sending a mail::

        transport = SendinblueTransport.from_options(api_key="xkeysib-...")
        message = MailMessage(from_="me@example.com", to="you@example.com")
        result = await transport.send(Mail(message, MailData(subject="Hi", text="Hello")))
        print(result.message_id, result.envelope)

Note:
    A response body that is not valid JSON is treated as an empty
    object. Error classification then relies on the status code alone
    and a successful send falls back to the locally generated message id.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import aiohttp

from . import __version__
from .body import build_body
from .config import DEFAULT_API_URL, TransportConfig
from .errors import ApiError, TransportError
from .logger import get_logger
from .mail import Mail
from .schema import SendEmailRequest

SendCallback = Callable[[Exception | None, "SendResult | None"], Any]


@dataclass(frozen=True)
class SendResult:
    """Outcome of a successful send."""

    message_id: str
    envelope: Any


def parse_response_body(raw: bytes) -> dict[str, Any]:
    """Decode a response body, tolerating anything that is not a JSON object."""
    try:
        body = json.loads(raw.decode("utf-8", errors="replace"))
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


class SendinblueTransport:
    """Mail transport backed by the Sendinblue HTTP API.

    Attributes:
        name: Transport name reported to callers.
        version: Package version, also sent in the user-agent.
        config: The :class:`TransportConfig` in use.
    """

    name = "sendinblue-transport"
    version = __version__

    def __init__(self, config: TransportConfig, logger=None):
        self.config = config
        self.logger = logger or get_logger()

    @classmethod
    def from_options(
        cls,
        api_key: str,
        sender_ip: str | None = None,
        api_url: str = DEFAULT_API_URL,
    ) -> SendinblueTransport:
        """Create a transport from individual settings."""
        return cls(TransportConfig(api_key=api_key, sender_ip=sender_ip, api_url=api_url))

    def request_headers(self) -> dict[str, str]:
        headers = {
            "api-key": self.config.api_key,
            "content-type": "application/json",
            "accept": "application/json",
            "user-agent": f"{self.name}/{self.version}",
        }
        if self.config.sender_ip:
            headers["sender.ip"] = self.config.sender_ip
        return headers

    async def send(self, mail: Mail) -> SendResult:
        """Build the request for ``mail`` and send it.

        Raises:
            ValidationError: If the mail cannot be expressed as a request.
            AttachmentIOError: If attachment content cannot be read.
            TransportError: If no response was received.
            ApiError: If the provider rejected the request.
        """
        self.logger.debug("Building request body for message %s", mail.message.message_id())
        body = await self.build_body(mail)
        return await self.send_request(mail, body)

    async def send_with_callback(self, mail: Mail, callback: SendCallback) -> None:
        """Send ``mail`` and report through ``callback(error, result)``.

        The callback runs exactly once, with either the error or the result.
        """
        try:
            result = await self.send(mail)
        except Exception as e:
            callback(e, None)
            return
        callback(None, result)

    async def build_body(self, mail: Mail) -> SendEmailRequest:
        return await build_body(mail)

    async def send_request(self, mail: Mail, body: SendEmailRequest) -> SendResult:
        """POST ``body`` to the provider and reconcile the response.

        Raises:
            TransportError: If the request fails before a response arrives.
            ApiError: If the response status is 400 or above.
        """
        envelope = mail.data.envelope or mail.message.get_envelope()
        message_id = mail.message.message_id()
        payload = json.dumps(body.to_payload()).encode("utf-8")

        self.logger.debug("POST %s (%d bytes)", self.config.api_url, len(payload))
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self.config.api_url,
                    data=payload,
                    headers=self.request_headers(),
                ) as response:
                    status = response.status
                    raw = await response.read()
        except (aiohttp.ClientError, OSError, asyncio.TimeoutError) as e:
            raise TransportError(f"request to {self.config.api_url} failed: {e}") from e

        response_body = parse_response_body(raw)
        if raw and not response_body:
            self.logger.debug("Ignoring non-JSON response body (status %s)", status)
        self.logger.debug("Provider answered with status %s", status)

        if status >= 400:
            raise ApiError(status, response_body)

        return SendResult(
            message_id=response_body.get("messageId") or message_id,
            envelope=envelope,
        )


__all__ = ["SendCallback", "SendResult", "SendinblueTransport", "parse_response_body"]
