# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Mail objects consumed by the transport.

The transport only needs three things from a message: its parsed
addresses by role, a transport envelope and a message id. Any object
implementing :class:`MessageLike` can be sent; :class:`MailMessage` is
the implementation built from plain header strings.

Example:
    Compose a mail::

        message = MailMessage(
            from_="Alice <alice@example.com>",
            to=["bob@example.com", "Carol <carol@example.com>"],
        )
        mail = Mail(message, MailData(subject="Hi", text="Hello"))
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from email.utils import getaddresses, make_msgid
from typing import Any, Protocol, runtime_checkable

ADDRESS_ROLES = ("from", "to", "cc", "bcc", "reply-to")


@dataclass(frozen=True)
class Address:
    """A parsed mailbox: bare address plus optional display name."""

    address: str
    name: str = ""


@dataclass
class Envelope:
    """SMTP-level sender and recipients, which may differ from the headers."""

    from_: str | None
    to: list[str] = field(default_factory=list)


@runtime_checkable
class MessageLike(Protocol):
    """Read-only view of a composed message."""

    def get_addresses(self) -> Mapping[str, list[Address]]: ...

    def get_envelope(self) -> Any: ...

    def message_id(self) -> str: ...


def parse_addresses(values: str | Iterable[str] | None) -> list[Address]:
    """Parse RFC 5322 address strings into :class:`Address` values.

    Accepts a single header value (possibly comma separated) or a list
    of them. Entries without an ``@`` are dropped.
    """
    if not values:
        return []
    if isinstance(values, str):
        values = [values]
    parsed = getaddresses(list(values))
    return [Address(address=addr, name=name) for name, addr in parsed if "@" in addr]


class MailMessage:
    """Message built from address header strings.

    Attributes:
        addresses: Parsed addresses keyed by role. Roles with no
            addresses are left out.
    """

    def __init__(
        self,
        from_: str | Iterable[str] | None = None,
        to: str | Iterable[str] | None = None,
        cc: str | Iterable[str] | None = None,
        bcc: str | Iterable[str] | None = None,
        reply_to: str | Iterable[str] | None = None,
        message_id: str | None = None,
    ):
        raw = {"from": from_, "to": to, "cc": cc, "bcc": bcc, "reply-to": reply_to}
        self.addresses: dict[str, list[Address]] = {}
        for role in ADDRESS_ROLES:
            parsed = parse_addresses(raw[role])
            if parsed:
                self.addresses[role] = parsed
        self._message_id = message_id or make_msgid(domain=self._id_domain())

    def _id_domain(self) -> str | None:
        senders = self.addresses.get("from")
        if senders:
            return senders[0].address.rpartition("@")[2] or None
        return None

    def get_addresses(self) -> dict[str, list[Address]]:
        return self.addresses

    def get_envelope(self) -> Envelope:
        """Envelope sender is the first ``from``; recipients are to+cc+bcc, de-duplicated."""
        senders = self.addresses.get("from") or []
        recipients: list[str] = []
        for role in ("to", "cc", "bcc"):
            for addr in self.addresses.get(role, []):
                if addr.address not in recipients:
                    recipients.append(addr.address)
        return Envelope(from_=senders[0].address if senders else None, to=recipients)

    def message_id(self) -> str:
        return self._message_id


@dataclass
class MailData:
    """Content and provider options of a mail.

    ``attachments`` holds plain mappings (``filename`` plus one of
    ``href``, ``path`` or ``content``) or prebuilt attachment variants
    from :mod:`sendinblue_transport.attachments`.
    """

    subject: str | None = None
    text: str | None = None
    html: str | None = None
    headers: dict[str, Any] | None = None
    params: dict[str, Any] | None = None
    template_id: int | None = None
    tags: list[str] | None = None
    batch_id: str | None = None
    envelope: Any = None
    attachments: list[Any] | None = None


@dataclass
class Mail:
    """The unit of work handed to the transport."""

    message: MessageLike
    data: MailData = field(default_factory=MailData)


__all__ = [
    "ADDRESS_ROLES",
    "Address",
    "Envelope",
    "Mail",
    "MailData",
    "MailMessage",
    "MessageLike",
    "parse_addresses",
]
