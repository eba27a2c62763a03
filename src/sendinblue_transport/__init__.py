# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Send mail through the Sendinblue (Brevo) transactional-email API.

This package turns a composed mail into one ``POST /v3/smtp/email``
request and returns the provider message id with the mail envelope.

Components:
    SendinblueTransport: Builds the request body and performs the send.
    MailMessage, MailData, Mail: Mail objects accepted by the transport.
    TransportConfig: API key, optional sender IP and endpoint.

Example:
    Send a mail::

        from sendinblue_transport import Mail, MailData, MailMessage, SendinblueTransport

        transport = SendinblueTransport.from_options(api_key="xkeysib-...")
        mail = Mail(
            MailMessage(from_="Me <me@example.com>", to="you@example.com"),
            MailData(subject="Hello", text="Hi there"),
        )
        result = await transport.send(mail)

        # Or via CLI
        # sendinblue-send --apikey ... --from me@example.com --to you@example.com ...
"""

__version__ = "1.0.0"

from .config import TransportConfig, load_config
from .errors import (
    ApiError,
    AttachmentIOError,
    MissingFilenameError,
    MissingSenderError,
    SendinblueTransportError,
    TooManyReplyToError,
    TooManySendersError,
    TransportError,
    UnsupportedAttachmentError,
    ValidationError,
)
from .mail import Address, Envelope, Mail, MailData, MailMessage, MessageLike
from .transport import SendinblueTransport, SendResult

__all__ = [
    "Address",
    "ApiError",
    "AttachmentIOError",
    "Envelope",
    "Mail",
    "MailData",
    "MailMessage",
    "MessageLike",
    "MissingFilenameError",
    "MissingSenderError",
    "SendResult",
    "SendinblueTransport",
    "SendinblueTransportError",
    "TooManyReplyToError",
    "TooManySendersError",
    "TransportConfig",
    "TransportError",
    "UnsupportedAttachmentError",
    "ValidationError",
    "__version__",
    "load_config",
]
