"""Tests for the HTTP exchange with the provider."""

import datetime
import json

import aiohttp
import pytest
from aioresponses import aioresponses
from yarl import URL

from sendinblue_transport import __version__
from sendinblue_transport.config import DEFAULT_API_URL, TransportConfig
from sendinblue_transport.errors import (
    ApiError,
    AttachmentIOError,
    InvalidRequestError,
    TooManySendersError,
    TransportError,
)
from sendinblue_transport.mail import Envelope, Mail, MailData, MailMessage
from sendinblue_transport.transport import SendinblueTransport, SendResult, parse_response_body

REQUEST_KEY = ("POST", URL(DEFAULT_API_URL))


def make_mail(**data) -> Mail:
    message = MailMessage(
        from_="Sender <sender@example.com>",
        to="rcpt@example.com",
        message_id="<local-id@example.com>",
    )
    return Mail(message, MailData(subject="Hi", text="Hello", **data))


@pytest.fixture
def transport():
    return SendinblueTransport.from_options(api_key="test-key")


class TestParseResponseBody:
    def test_json_object(self):
        assert parse_response_body(b'{"messageId": "x"}') == {"messageId": "x"}

    def test_invalid_json(self):
        assert parse_response_body(b"<html>oops</html>") == {}

    def test_empty(self):
        assert parse_response_body(b"") == {}

    def test_non_object_json(self):
        assert parse_response_body(b'["a", "b"]') == {}


class TestRequest:
    @pytest.mark.asyncio
    async def test_headers_and_body(self, transport):
        with aioresponses() as m:
            m.post(DEFAULT_API_URL, status=201, payload={"messageId": "abc-123"})

            await transport.send(make_mail())

            request = m.requests[REQUEST_KEY][0]
            headers = request.kwargs["headers"]
            assert headers["api-key"] == "test-key"
            assert headers["content-type"] == "application/json"
            assert headers["accept"] == "application/json"
            assert headers["user-agent"] == f"sendinblue-transport/{__version__}"
            assert "sender.ip" not in headers

            body = json.loads(request.kwargs["data"])
            assert body == {
                "sender": {"email": "sender@example.com", "name": "Sender"},
                "to": [{"email": "rcpt@example.com"}],
                "subject": "Hi",
                "textContent": "Hello",
            }

    @pytest.mark.asyncio
    async def test_sender_ip_header(self):
        transport = SendinblueTransport(TransportConfig(api_key="k", sender_ip="203.0.113.7"))

        with aioresponses() as m:
            m.post(DEFAULT_API_URL, status=201, payload={})

            await transport.send(make_mail())

            headers = m.requests[REQUEST_KEY][0].kwargs["headers"]
            assert headers["sender.ip"] == "203.0.113.7"

    @pytest.mark.asyncio
    async def test_custom_endpoint(self):
        url = "https://sandbox.example.com/v3/smtp/email"
        transport = SendinblueTransport.from_options(api_key="k", api_url=url)

        with aioresponses() as m:
            m.post(url, status=201, payload={"messageId": "sandbox"})

            result = await transport.send(make_mail())

        assert result.message_id == "sandbox"

    @pytest.mark.asyncio
    async def test_exactly_one_request(self, transport):
        with aioresponses() as m:
            m.post(DEFAULT_API_URL, status=500, payload={"message": "boom"})

            with pytest.raises(ApiError):
                await transport.send(make_mail())

            assert len(m.requests[REQUEST_KEY]) == 1


class TestSuccess:
    @pytest.mark.asyncio
    async def test_provider_message_id(self, transport):
        mail = make_mail()

        with aioresponses() as m:
            m.post(DEFAULT_API_URL, status=201, payload={"messageId": "abc-123"})

            result = await transport.send(mail)

        assert result == SendResult(
            message_id="abc-123",
            envelope=Envelope(from_="sender@example.com", to=["rcpt@example.com"]),
        )

    @pytest.mark.asyncio
    async def test_envelope_override(self, transport):
        override = {"from": "bounce@example.com", "to": ["other@example.com"]}

        with aioresponses() as m:
            m.post(DEFAULT_API_URL, status=201, payload={"messageId": "abc-123"})

            result = await transport.send(make_mail(envelope=override))

        assert result.envelope is override

    @pytest.mark.asyncio
    async def test_unparseable_body_falls_back_to_local_id(self, transport):
        with aioresponses() as m:
            m.post(DEFAULT_API_URL, status=200, body="definitely not json")

            result = await transport.send(make_mail())

        assert result.message_id == "<local-id@example.com>"

    @pytest.mark.asyncio
    async def test_missing_message_id_falls_back(self, transport):
        with aioresponses() as m:
            m.post(DEFAULT_API_URL, status=202, payload={})

            result = await transport.send(make_mail())

        assert result.message_id == "<local-id@example.com>"


class TestFailures:
    @pytest.mark.asyncio
    async def test_api_error(self, transport):
        with aioresponses() as m:
            m.post(
                DEFAULT_API_URL,
                status=400,
                payload={"message": "Bad request", "code": "invalid_parameter"},
            )

            with pytest.raises(ApiError) as exc_info:
                await transport.send(make_mail())

        text = str(exc_info.value)
        assert "Bad request" in text
        assert "invalid_parameter" in text
        assert "400" in text
        assert exc_info.value.status == 400

    @pytest.mark.asyncio
    async def test_api_error_with_unparseable_body(self, transport):
        with aioresponses() as m:
            m.post(DEFAULT_API_URL, status=503, body="Service Unavailable")

            with pytest.raises(ApiError, match=r"invalid response \(code: None, statusCode: 503\)"):
                await transport.send(make_mail())

    @pytest.mark.asyncio
    async def test_transport_error(self, transport):
        with aioresponses() as m:
            m.post(DEFAULT_API_URL, exception=aiohttp.ClientConnectionError("refused"))

            with pytest.raises(TransportError) as exc_info:
                await transport.send(make_mail())

        assert isinstance(exc_info.value.__cause__, aiohttp.ClientConnectionError)

    @pytest.mark.asyncio
    async def test_build_failure_sends_nothing(self, transport):
        mail = Mail(MailMessage(from_=["a@example.com", "b@example.com"], to="c@example.com"))

        with aioresponses() as m:
            with pytest.raises(TooManySendersError):
                await transport.send(mail)

            assert not m.requests

    @pytest.mark.asyncio
    async def test_attachment_failure_sends_nothing(self, transport, tmp_path):
        mail = make_mail(attachments=[{"filename": "x", "path": str(tmp_path / "missing")}])

        with aioresponses() as m:
            with pytest.raises(AttachmentIOError):
                await transport.send(mail)

            assert not m.requests


class TestCallback:
    @pytest.mark.asyncio
    async def test_success_callback(self, transport):
        calls = []

        with aioresponses() as m:
            m.post(DEFAULT_API_URL, status=201, payload={"messageId": "abc-123"})

            await transport.send_with_callback(make_mail(), lambda err, info: calls.append((err, info)))

        assert len(calls) == 1
        err, info = calls[0]
        assert err is None
        assert info.message_id == "abc-123"

    @pytest.mark.asyncio
    async def test_error_callback(self, transport):
        calls = []

        with aioresponses() as m:
            m.post(DEFAULT_API_URL, status=401, payload={"message": "Key not found", "code": "unauthorized"})

            await transport.send_with_callback(make_mail(), lambda err, info: calls.append((err, info)))

        assert len(calls) == 1
        err, info = calls[0]
        assert isinstance(err, ApiError)
        assert info is None


def test_transport_identity(transport):
    assert transport.name == "sendinblue-transport"
    assert transport.version == __version__


class TestSerialization:
    @pytest.mark.asyncio
    async def test_date_param_is_sent_as_iso_string(self, transport):
        mail = make_mail(params={"when": datetime.date(2024, 1, 1)})

        with aioresponses() as m:
            m.post(DEFAULT_API_URL, status=201, payload={"messageId": "abc-123"})

            await transport.send(mail)

            body = json.loads(m.requests[REQUEST_KEY][0].kwargs["data"])

        assert body["params"] == {"when": "2024-01-01"}

    @pytest.mark.asyncio
    async def test_unserializable_param_sends_nothing(self, transport):
        mail = make_mail(params={"obj": object()})

        with aioresponses() as m:
            with pytest.raises(InvalidRequestError):
                await transport.send(mail)

            assert not m.requests
