"""Tests for akoolgen.core.provider — the Akool endpoint wrapper."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from akoolgen.core.auth import AuthContext, AuthMode
from akoolgen.core.errors import (
    AuthenticationExpired,
    GenerationFailed,
    ProviderError,
    TransportError,
    Unauthenticated,
    ValidationError,
)
from akoolgen.core.provider import AkoolProvider
from akoolgen.core.schemas import JobStatus

API_KEY_CTX = AuthContext(mode=AuthMode.API_KEY, api_key="k-123")
TOKEN_CTX = AuthContext(mode=AuthMode.CLIENT_CREDENTIALS, token="tok", client_id="cid")


@pytest.fixture
def provider(test_config, fake_akool):
    client = httpx.AsyncClient(transport=fake_akool.transport)
    return AkoolProvider(client, test_config)


class TestCreateFromPrompt:
    """create_from_prompt -> POST content/image/createbyprompt."""

    def test_sends_body_and_headers(self, provider, fake_akool):
        handle = asyncio.run(
            provider.create_from_prompt(API_KEY_CTX, "a cat", "16:9", "https://x/src.png")
        )

        request = fake_akool.requests[-1]
        assert request.method == "POST"
        assert request.url.path == "/api/open/v3/content/image/createbyprompt"
        assert request.headers["x-api-key"] == "k-123"
        assert json.loads(request.content) == {
            "prompt": "a cat",
            "scale": "16:9",
            "webhookUrl": "",
            "source_image": "https://x/src.png",
        }
        assert handle.id == "job-1"
        assert handle.status is JobStatus.QUEUED
        assert handle.aspect_ratio == "16:9"

    def test_defaults_scale_and_omits_source(self, provider, fake_akool):
        asyncio.run(provider.create_from_prompt(TOKEN_CTX, "a cat"))

        request = fake_akool.requests[-1]
        assert request.headers["authorization"] == "Bearer tok"
        body = json.loads(request.content)
        assert body["scale"] == "1:1"
        assert "source_image" not in body

    @pytest.mark.parametrize("prompt", ["", "   "])
    def test_blank_prompt_rejected_without_request(self, provider, fake_akool, prompt):
        with pytest.raises(ValidationError, match="Prompt is required"):
            asyncio.run(provider.create_from_prompt(API_KEY_CTX, prompt))
        assert fake_akool.requests == []

    def test_missing_context(self, provider, fake_akool):
        with pytest.raises(Unauthenticated):
            asyncio.run(provider.create_from_prompt(None, "a cat"))
        assert fake_akool.requests == []


class TestCreateFromAction:
    """create_from_action -> POST content/image/createbybutton."""

    def test_sends_id_and_button(self, provider, fake_akool):
        handle = asyncio.run(provider.create_from_action(API_KEY_CTX, "parent-1", "V2"))

        request = fake_akool.requests[-1]
        assert request.url.path.endswith("/content/image/createbybutton")
        assert json.loads(request.content) == {"_id": "parent-1", "button": "V2", "webhookUrl": ""}
        assert handle.id == "job-1"

    @pytest.mark.parametrize("job_id, code", [("", "U1"), ("p", ""), (None, "U1")])
    def test_missing_fields(self, provider, job_id, code):
        with pytest.raises(ValidationError, match="_id and button are required"):
            asyncio.run(provider.create_from_action(API_KEY_CTX, job_id, code))

    def test_malformed_code(self, provider, fake_akool):
        with pytest.raises(ValidationError, match="Invalid button"):
            asyncio.run(provider.create_from_action(API_KEY_CTX, "p", "Z9"))
        assert fake_akool.requests == []


class TestGetStatus:
    """get_status -> GET content/image/infobymodelid."""

    def test_parses_snapshot(self, provider, fake_akool):
        fake_akool.statuses["abc"] = {
            "image_status": 3,
            "image": "https://x/grid.png",
            "upscaled_urls": ["1", "2", "3", "4"],
            "buttons": ["U1", "V1"],
        }
        snapshot = asyncio.run(provider.get_status(API_KEY_CTX, "abc"))

        request = fake_akool.requests[-1]
        assert request.method == "GET"
        assert request.url.params["image_model_id"] == "abc"
        assert snapshot.status is JobStatus.COMPLETED
        assert snapshot.derived_images == ("1", "2", "3", "4")

    def test_empty_id(self, provider):
        with pytest.raises(ValidationError, match="Image model ID is required"):
            asyncio.run(provider.get_status(API_KEY_CTX, ""))


class TestProviderFailures:
    """Envelope and transport failures."""

    @pytest.mark.parametrize(
        "code, error_cls", [(1101, AuthenticationExpired), (1108, GenerationFailed), (1003, ProviderError)]
    )
    def test_non_success_code(self, provider, fake_akool, code, error_cls):
        fake_akool.next_error = {"code": code, "msg": "provider message", "data": {"k": "v"}}
        with pytest.raises(error_cls) as exc_info:
            asyncio.run(provider.create_from_prompt(API_KEY_CTX, "a cat"))
        assert exc_info.value.code == code
        assert exc_info.value.message == "provider message"
        assert exc_info.value.data == {"k": "v"}

    def test_transport_failure(self, provider, fake_akool):
        fake_akool.fail_transport = True
        with pytest.raises(TransportError):
            asyncio.run(provider.get_status(API_KEY_CTX, "abc"))

    def test_non_json_body(self, test_config):
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(502, text="Bad gateway"))
        )
        provider = AkoolProvider(client, test_config)
        with pytest.raises(TransportError, match="non-JSON"):
            asyncio.run(provider.get_status(API_KEY_CTX, "abc"))

    def test_success_without_id_is_provider_error(self, test_config):
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(
                lambda request: httpx.Response(200, json={"code": 1000, "data": {}})
            )
        )
        provider = AkoolProvider(client, test_config)
        with pytest.raises(ProviderError):
            asyncio.run(provider.create_from_prompt(API_KEY_CTX, "a cat"))

    def test_http_error_without_code_is_transport_error(self, provider, fake_akool):
        """A gateway or outage reply carries no provider code to report."""
        fake_akool.next_error = {"message": "service unavailable"}
        fake_akool.next_error_status = 503
        with pytest.raises(TransportError, match="HTTP 503: service unavailable") as exc_info:
            asyncio.run(provider.create_from_prompt(API_KEY_CTX, "a cat"))
        assert not isinstance(exc_info.value, ValidationError)

    def test_http_error_with_code_is_provider_error(self, provider, fake_akool):
        fake_akool.next_error = {"code": 1101, "msg": "token expired"}
        fake_akool.next_error_status = 401
        with pytest.raises(AuthenticationExpired):
            asyncio.run(provider.get_status(API_KEY_CTX, "abc"))
