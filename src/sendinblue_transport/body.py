# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Translation of a :class:`Mail` into the provider request body."""

from __future__ import annotations

from collections.abc import Iterable

import pydantic

from .attachments import build_attachments
from .errors import (
    InvalidRequestError,
    MissingSenderError,
    TooManyReplyToError,
    TooManySendersError,
)
from .mail import Address, Mail
from .schema import ProviderAddress, SendEmailRequest


def fixup_address(address: Address) -> ProviderAddress:
    """Move ``address`` under ``email`` and drop an empty name.

    The provider refuses an empty-string ``name``.
    """
    return ProviderAddress(email=address.address, name=address.name or None)


def fixup_addresses(addresses: Iterable[Address] | None) -> list[ProviderAddress]:
    return [fixup_address(address) for address in addresses or []]


async def build_body(mail: Mail) -> SendEmailRequest:
    """Build the request body for ``mail``.

    Sender and reply-to are single objects, so at most one of each is
    accepted. Empty recipient lists, headers and attachments are left
    out because the provider rejects empty collections.

    Raises:
        MissingSenderError: If there is no ``from`` address.
        TooManySendersError: If there are several ``from`` addresses.
        TooManyReplyToError: If there are several ``reply-to`` addresses.
        InvalidRequestError: If a field fails the request schema.
        ValidationError: For invalid attachments.
        AttachmentIOError: If attachment content cannot be read.
    """
    addresses = mail.message.get_addresses()
    data = mail.data

    senders = addresses.get("from") or []
    if len(senders) > 1:
        raise TooManySendersError(len(senders))
    if not senders:
        raise MissingSenderError()

    reply_to = addresses.get("reply-to") or []
    if len(reply_to) > 1:
        raise TooManyReplyToError(len(reply_to))

    attachment = await build_attachments(data.attachments) if data.attachments else None

    try:
        return SendEmailRequest(
            sender=fixup_address(senders[0]),
            to=fixup_addresses(addresses.get("to")),
            cc=fixup_addresses(addresses.get("cc")),
            bcc=fixup_addresses(addresses.get("bcc")),
            reply_to=fixup_address(reply_to[0]) if reply_to else None,
            subject=data.subject,
            text_content=data.text,
            html_content=data.html,
            headers=data.headers,
            params=data.params,
            tags=data.tags,
            batch_id=data.batch_id,
            template_id=data.template_id,
            attachment=attachment,
        )
    except pydantic.ValidationError as e:
        raise InvalidRequestError(f"invalid request body: {e}") from e


__all__ = ["build_body", "fixup_address", "fixup_addresses"]
