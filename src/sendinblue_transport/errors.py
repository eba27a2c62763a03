# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Exception hierarchy raised by the Sendinblue transport.

Every failure of a send surfaces as one of these exceptions:

- ValidationError: caller data the provider would reject, detected
  before any network I/O.
- AttachmentIOError: a local file or stream could not be read.
- TransportError: the HTTP request never produced a response.
- ApiError: the provider answered with a status code >= 400.

Each class exposes a short machine-readable ``code`` attribute.
"""

from __future__ import annotations

from typing import Any


class SendinblueTransportError(Exception):
    """Base class for all transport errors."""

    code = "transport_error"


class ValidationError(SendinblueTransportError, ValueError):
    """The mail cannot be expressed as a valid provider request."""

    code = "validation_error"


class TooManySendersError(ValidationError):
    """Raised when the mail has more than one ``from`` address."""

    code = "too_many_senders"

    def __init__(self, count: int):
        self.count = count
        super().__init__(f"multiple from addresses not supported ({count} given)")


class MissingSenderError(ValidationError):
    """Raised when the mail has no ``from`` address at all."""

    code = "missing_sender"

    def __init__(self, message: str = "missing from address"):
        super().__init__(message)


class TooManyReplyToError(ValidationError):
    """Raised when the mail has more than one ``reply-to`` address."""

    code = "too_many_reply_to"

    def __init__(self, count: int):
        self.count = count
        super().__init__(f"multiple reply-to addresses not supported ({count} given)")


class InvalidRequestError(ValidationError):
    """Mail data the provider schema cannot represent, e.g. an empty address."""

    code = "invalid_request"


class MissingFilenameError(ValidationError):
    code = "missing_filename"

    def __init__(self, message: str = "missing filename for attachment"):
        super().__init__(message)


class UnsupportedAttachmentError(ValidationError):
    code = "unsupported_attachment"

    def __init__(self, message: str = "unsupported attachment format"):
        super().__init__(message)


class AttachmentIOError(SendinblueTransportError, OSError):
    """Reading attachment content failed. The original error is ``__cause__``."""

    code = "attachment_io_error"

    def __init__(self, filename: str, reason: str):
        self.filename = filename
        super().__init__(f"cannot read attachment '{filename}': {reason}")


class TransportError(SendinblueTransportError):
    """The request failed before any response was received."""

    code = "transport_failure"


class ApiError(SendinblueTransportError):
    """The provider rejected the request.

    Attributes:
        status: HTTP status code of the response.
        api_code: Provider error code from the response body, if any.
        body: Parsed response body (empty dict when unparseable).
    """

    code = "api_error"

    def __init__(self, status: int, body: dict[str, Any] | None = None):
        self.status = status
        self.body = body or {}
        self.api_code = self.body.get("code")
        super().__init__(response_error_message(status, self.body))


def response_error_message(status: int, body: dict[str, Any]) -> str:
    """Compose the error text for a rejected request."""
    message = body.get("message") or "invalid response"
    return f"{message} (code: {body.get('code')}, statusCode: {status})"


__all__ = [
    "ApiError",
    "InvalidRequestError",
    "AttachmentIOError",
    "MissingFilenameError",
    "MissingSenderError",
    "SendinblueTransportError",
    "TooManyReplyToError",
    "TooManySendersError",
    "TransportError",
    "UnsupportedAttachmentError",
    "ValidationError",
    "response_error_message",
]
