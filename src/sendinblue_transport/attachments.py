# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Attachment materialization for the provider request.

Callers describe attachments as plain mappings with a ``filename`` and
exactly one content source. :func:`parse_attachment` resolves a mapping
once into one of five variants:

- ``href``: :class:`RemoteAttachment`, passed to the provider as a URL
- ``path``: :class:`PathAttachment`, read from the local filesystem
- ``content`` as ``str``: :class:`TextAttachment`, with optional ``encoding``
- ``content`` as bytes: :class:`BufferAttachment`
- ``content`` as a readable stream: :class:`StreamAttachment`

Every variant except the remote one is read fully into memory and sent
base64-encoded. Raw MIME attachments (``raw``) are not supported.

Example:
    Materialize a list of attachments::

        attachments = await build_attachments([
            {"filename": "a.txt", "content": "hello"},
            {"filename": "b.pdf", "path": "/tmp/b.pdf"},
            {"filename": "c.png", "href": "https://example.com/c.png"},
        ])
"""

from __future__ import annotations

import asyncio
import base64
import codecs
import inspect
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import AttachmentIOError, MissingFilenameError, UnsupportedAttachmentError
from .schema import ProviderAttachment

CONTENT_KEYS = ("href", "path", "content")

# Encoding names accepted in addition to Python codec names.
ENCODING_ALIASES = {
    "binary": "latin-1",
    "ucs2": "utf-16-le",
    "ucs-2": "utf-16-le",
    "utf16le": "utf-16-le",
}


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _as_bytes(chunk: Any) -> bytes:
    if isinstance(chunk, str):
        return chunk.encode("utf-8")
    return bytes(chunk)


def is_stream(value: Any) -> bool:
    """True for objects with a ``read()`` method or async iterators of chunks."""
    return callable(getattr(value, "read", None)) or hasattr(value, "__aiter__")


@dataclass(frozen=True)
class RemoteAttachment:
    """Attachment the provider downloads itself from ``href``."""

    filename: str
    href: str

    async def materialize(self) -> ProviderAttachment:
        return ProviderAttachment(name=self.filename, url=self.href)


@dataclass(frozen=True)
class PathAttachment:
    """Attachment read from a local file."""

    filename: str
    path: str | Path

    async def materialize(self) -> ProviderAttachment:
        try:
            data = await asyncio.to_thread(Path(self.path).read_bytes)
        except OSError as e:
            raise AttachmentIOError(self.filename, str(e)) from e
        return ProviderAttachment(name=self.filename, content=_b64(data))


@dataclass(frozen=True)
class TextAttachment:
    """Attachment given as a string in ``encoding`` (utf-8 when unset).

    A ``base64`` string is forwarded verbatim.
    """

    filename: str
    content: str
    encoding: str | None = None

    def encode(self) -> bytes:
        encoding = (self.encoding or "utf-8").lower()
        if encoding == "hex":
            return bytes.fromhex(self.content)
        if encoding == "base64url":
            padded = self.content + "=" * (-len(self.content) % 4)
            return base64.urlsafe_b64decode(padded)
        return self.content.encode(ENCODING_ALIASES.get(encoding, encoding))

    async def materialize(self) -> ProviderAttachment:
        if self.encoding and self.encoding.lower() == "base64":
            return ProviderAttachment(name=self.filename, content=self.content)
        try:
            data = self.encode()
        except (ValueError, LookupError) as e:
            raise UnsupportedAttachmentError(
                f"cannot encode attachment '{self.filename}' as {self.encoding}: {e}"
            ) from e
        return ProviderAttachment(name=self.filename, content=_b64(data))


@dataclass(frozen=True)
class BufferAttachment:
    """Attachment given as in-memory bytes."""

    filename: str
    content: bytes

    async def materialize(self) -> ProviderAttachment:
        return ProviderAttachment(name=self.filename, content=_b64(bytes(self.content)))


@dataclass(frozen=True)
class StreamAttachment:
    """Attachment drained from a readable stream.

    Supported streams: objects with an async ``read()`` such as
    :class:`asyncio.StreamReader`, async iterators of byte chunks, and
    synchronous binary file objects (read in a worker thread). The
    whole stream is buffered before encoding.
    """

    filename: str
    content: Any

    async def drain(self) -> bytes:
        read = getattr(self.content, "read", None)
        if callable(read):
            if inspect.iscoroutinefunction(read):
                return _as_bytes(await read())
            return _as_bytes(await asyncio.to_thread(read))
        chunks = [_as_bytes(chunk) async for chunk in self.content]
        return b"".join(chunks)

    async def materialize(self) -> ProviderAttachment:
        try:
            data = await self.drain()
        except Exception as e:
            raise AttachmentIOError(self.filename, str(e)) from e
        return ProviderAttachment(name=self.filename, content=_b64(data))


AttachmentSource = (
    RemoteAttachment
    | PathAttachment
    | TextAttachment
    | BufferAttachment
    | StreamAttachment
)
ATTACHMENT_VARIANTS = (
    RemoteAttachment,
    PathAttachment,
    TextAttachment,
    BufferAttachment,
    StreamAttachment,
)


def _check_encoding(encoding: Any) -> str | None:
    if encoding is None:
        return None
    if not isinstance(encoding, str):
        raise UnsupportedAttachmentError(f"invalid attachment encoding: {encoding!r}")
    name = encoding.lower()
    if name in ("base64", "base64url", "hex") or name in ENCODING_ALIASES:
        return encoding
    try:
        info = codecs.lookup(name)
    except LookupError:
        raise UnsupportedAttachmentError(f"unknown attachment encoding: {encoding}") from None
    # bytes-to-bytes and str-to-str codecs such as zlib or rot13
    if not getattr(info, "_is_text_encoding", True):
        raise UnsupportedAttachmentError(f"not a text encoding: {encoding}")
    return encoding


def parse_attachment(attachment: Mapping[str, Any] | AttachmentSource) -> AttachmentSource:
    """Resolve an attachment description into exactly one variant.

    Raises:
        UnsupportedAttachmentError: For ``raw`` attachments and for
            descriptions with zero or several content sources.
        MissingFilenameError: If ``filename`` is missing or empty.
    """
    if isinstance(attachment, ATTACHMENT_VARIANTS):
        if not attachment.filename:
            raise MissingFilenameError()
        return attachment
    if not isinstance(attachment, Mapping):
        raise UnsupportedAttachmentError(
            f"unsupported attachment format: {type(attachment).__name__}"
        )

    if attachment.get("raw") is not None:
        raise UnsupportedAttachmentError("raw attachments not supported")

    filename = attachment.get("filename")
    if not isinstance(filename, str) or not filename:
        raise MissingFilenameError()

    present = [key for key in CONTENT_KEYS if attachment.get(key) is not None]
    if len(present) != 1:
        raise UnsupportedAttachmentError(
            f"attachment '{filename}' must have exactly one of href, path or content"
        )

    key = present[0]
    value = attachment[key]
    if key == "href" and isinstance(value, str):
        return RemoteAttachment(filename=filename, href=value)
    if key == "path" and isinstance(value, (str, Path)):
        return PathAttachment(filename=filename, path=value)
    if key == "content":
        if isinstance(value, str):
            return TextAttachment(
                filename=filename,
                content=value,
                encoding=_check_encoding(attachment.get("encoding")),
            )
        if isinstance(value, (bytes, bytearray, memoryview)):
            return BufferAttachment(filename=filename, content=bytes(value))
        if is_stream(value):
            return StreamAttachment(filename=filename, content=value)

    raise UnsupportedAttachmentError(f"unsupported attachment format for '{filename}'")


async def build_attachment(attachment: Mapping[str, Any] | AttachmentSource) -> ProviderAttachment:
    """Materialize a single attachment."""
    return await parse_attachment(attachment).materialize()


async def build_attachments(
    attachments: Iterable[Mapping[str, Any] | AttachmentSource],
) -> list[ProviderAttachment]:
    """Materialize all attachments concurrently, preserving order.

    Every description is validated before any I/O starts. If one
    attachment fails the others are cancelled and the error propagates.
    """
    sources = [parse_attachment(att) for att in attachments]
    tasks = [asyncio.ensure_future(source.materialize()) for source in sources]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        raise


__all__ = [
    "ATTACHMENT_VARIANTS",
    "AttachmentSource",
    "BufferAttachment",
    "PathAttachment",
    "RemoteAttachment",
    "StreamAttachment",
    "TextAttachment",
    "build_attachment",
    "build_attachments",
    "is_stream",
    "parse_attachment",
]
