# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Pydantic schemas for the provider's send-email request body.

The provider rejects empty strings, empty objects and empty arrays as
malformed instead of treating them as absent, so every optional field
here defaults to ``None`` and :meth:`SendEmailRequest.to_payload` drops
``None`` values rather than emitting ``null``.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .errors import InvalidRequestError


class ProviderAddress(BaseModel):
    """Address in the provider's shape: ``{"email": ..., "name": ...}``."""

    model_config = ConfigDict(extra="forbid")

    email: Annotated[str, Field(min_length=1, description="Email address")]
    name: Annotated[
        str | None,
        Field(default=None, min_length=1, description="Display name, omitted when empty")
    ]


class ProviderAttachment(BaseModel):
    """Attachment as either inline base64 ``content`` or a remote ``url``."""

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1, description="Attachment filename")]
    content: Annotated[
        str | None,
        Field(default=None, description="Base64-encoded content")
    ]
    url: Annotated[
        str | None,
        Field(default=None, description="Absolute URL the provider downloads from")
    ]

    @model_validator(mode="after")
    def _one_source(self) -> ProviderAttachment:
        if (self.content is None) == (self.url is None):
            raise ValueError("attachment needs exactly one of content or url")
        return self


class SendEmailRequest(BaseModel):
    """Body of ``POST /v3/smtp/email``.

    Attributes:
        sender: The single sender address.
        to: Recipients. Omitted when there are none.
        cc: Carbon-copy recipients.
        bcc: Blind carbon-copy recipients.
        reply_to: Single Reply-To address.
        subject: Subject line.
        text_content: Plain-text body.
        html_content: HTML body.
        headers: Custom headers. Omitted when empty.
        params: Template parameters.
        tags: Tags attached to the message.
        batch_id: Provider batch identifier.
        template_id: Provider template to render.
        attachment: Materialized attachments. Omitted when empty.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    sender: ProviderAddress
    to: list[ProviderAddress] | None = None
    cc: list[ProviderAddress] | None = None
    bcc: list[ProviderAddress] | None = None
    reply_to: Annotated[ProviderAddress | None, Field(default=None, alias="replyTo")]
    subject: str | None = None
    text_content: Annotated[str | None, Field(default=None, alias="textContent")]
    html_content: Annotated[str | None, Field(default=None, alias="htmlContent")]
    headers: dict[str, Any] | None = None
    params: dict[str, Any] | None = None
    tags: list[str] | None = None
    batch_id: Annotated[str | None, Field(default=None, alias="batchId")]
    template_id: Annotated[int | None, Field(default=None, alias="templateId")]
    attachment: list[ProviderAttachment] | None = None

    @field_validator("to", "cc", "bcc", "headers", "attachment", mode="after")
    @classmethod
    def _empty_as_absent(cls, value: Any) -> Any:
        return value if value else None

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-ready dict, with provider key names and no ``None`` values.

        Values in ``params`` and ``headers`` such as dates are converted to
        their JSON form.

        Raises:
            InvalidRequestError: If a value has no JSON representation.
        """
        try:
            return self.model_dump(mode="json", by_alias=True, exclude_none=True)
        except ValueError as e:
            raise InvalidRequestError(f"request body is not JSON serializable: {e}") from e


__all__ = ["ProviderAddress", "ProviderAttachment", "SendEmailRequest"]
