"""
Content Store Tests
====================

Local CID addressing and the Pinata client against a mocked HTTP API.
"""

from __future__ import annotations

import json

import httpx
import pytest

from blockcred.config import ContentBackend, ContentStoreConfig
from blockcred.content import (
    LocalContentStore,
    PinataContentStore,
    compute_cid,
    create_content_store,
)
from blockcred.errors import MetadataSerializationError, NotFoundError, UpstreamError, ValidationError

GATEWAY = "https://gateway.pinata.cloud/ipfs/"


class TestLocalContentStore:

    def test_upload_and_get(self, content_store):
        cid = content_store.upload(b"transcript", "t.pdf", {"student_id": "S1"})
        assert content_store.get(cid) == b"transcript"
        assert content_store.file_url(cid) == GATEWAY + cid

    def test_cid_is_cidv1_raw(self):
        cid = compute_cid(b"hello")
        assert cid.startswith("bafkrei")
        assert cid == cid.lower()
        assert len(cid) == 59

    def test_same_bytes_same_cid(self, content_store):
        first = content_store.upload(b"same", "a.pdf", {})
        second = content_store.upload(b"same", "b.pdf", {})
        assert first == second
        assert content_store.pin_count == 2

    def test_empty_data_rejected(self, content_store):
        with pytest.raises(ValidationError):
            content_store.upload(b"", "a.pdf", {})
        assert content_store.pin_count == 0

    def test_missing_filename_rejected(self, content_store):
        with pytest.raises(ValidationError):
            content_store.upload(b"x", "  ", {})

    def test_pin_json(self, content_store):
        cid = content_store.pin_json({"b": 1, "a": 2}, "meta.json")
        assert content_store.get(cid) == b'{"a":2,"b":1}'

    def test_unknown_cid(self, content_store):
        with pytest.raises(NotFoundError):
            content_store.get("bafkreinothing")


class PinataApi:
    """Records requests and answers like Pinata."""

    def __init__(self, status=200, body=None, raise_error=None):
        self.status = status
        self.body = body if body is not None else {
            "IpfsHash": "bafkreipinned", "PinSize": 42, "Timestamp": "2024-06-01T10:30:00Z",
        }
        self.raise_error = raise_error
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        if self.raise_error:
            raise self.raise_error
        return httpx.Response(self.status, json=self.body)


def _pinata(api: PinataApi, key="key", secret="secret") -> PinataContentStore:
    return PinataContentStore(
        api_key=key, api_secret=secret, transport=httpx.MockTransport(api),
    )


class TestPinataContentStore:

    def test_pin_file_request(self):
        api = PinataApi()
        cid = _pinata(api).upload(b"%PDF", "degree.pdf", {"student_id": "S1", "cgpa": 9.1})

        assert cid == "bafkreipinned"
        request = api.requests[0]
        assert request.url.path == "/pinning/pinFileToIPFS"
        assert request.headers["pinata_api_key"] == "key"
        assert request.headers["pinata_secret_api_key"] == "secret"
        body = request.content
        assert b'name="file"; filename="degree.pdf"' in body
        assert b'{"cidVersion": 1}' in body
        assert b'"keyvalues": {"student_id": "S1", "cgpa": 9.1}' in body

    def test_pin_json_request(self):
        api = PinataApi()
        cid = _pinata(api).pin_json({"cert_id": "0x1"}, "record.json")

        assert cid == "bafkreipinned"
        request = api.requests[0]
        assert request.url.path == "/pinning/pinJSONToIPFS"
        assert json.loads(request.content) == {
            "pinataContent": {"cert_id": "0x1"},
            "pinataMetadata": {"name": "record.json"},
            "pinataOptions": {"cidVersion": 1},
        }

    def test_pin_json_body_is_canonical(self):
        api = PinataApi()
        _pinata(api).pin_json({"b": 1, "a": 2}, "record.json")
        request = api.requests[0]
        assert request.content == (
            b'{"pinataContent":{"a":2,"b":1},"pinataMetadata":{"name":"record.json"},'
            b'"pinataOptions":{"cidVersion":1}}'
        )
        assert request.headers["content-type"] == "application/json"

    def test_pin_json_rejects_unserializable_content(self):
        api = PinataApi()
        with pytest.raises(MetadataSerializationError):
            _pinata(api).pin_json({"blob": b"x"}, "bad.json")
        assert api.requests == []

    def test_missing_credentials_fail_before_io(self):
        api = PinataApi()
        with pytest.raises(UpstreamError, match="credentials"):
            _pinata(api, key="", secret="").upload(b"x", "a.pdf", {})
        assert api.requests == []

    def test_validation_before_io(self):
        api = PinataApi()
        with pytest.raises(ValidationError):
            _pinata(api).upload(b"", "a.pdf", {})
        assert api.requests == []

    def test_structured_error(self):
        api = PinataApi(
            status=401,
            body={"error": {"reason": "INVALID_API_KEYS", "details": "Invalid API key provided"}},
        )
        with pytest.raises(UpstreamError, match="INVALID_API_KEYS - Invalid API key provided"):
            _pinata(api).upload(b"x", "a.pdf", {})

    def test_string_error(self):
        api = PinataApi(status=403, body={"error": "quota exceeded"})
        with pytest.raises(UpstreamError, match="quota exceeded"):
            _pinata(api).upload(b"x", "a.pdf", {})

    def test_transport_error(self):
        api = PinataApi(raise_error=httpx.ConnectError("refused"))
        with pytest.raises(UpstreamError, match="refused"):
            _pinata(api).upload(b"x", "a.pdf", {})

    def test_malformed_success_body(self):
        api = PinataApi(body={"unexpected": True})
        with pytest.raises(UpstreamError, match="Unexpected"):
            _pinata(api).upload(b"x", "a.pdf", {})

    def test_file_url(self):
        assert _pinata(PinataApi()).file_url("bafy") == GATEWAY + "bafy"


def test_factory_selects_backend():
    assert isinstance(create_content_store(ContentStoreConfig()), LocalContentStore)
    pinata = create_content_store(
        ContentStoreConfig(backend=ContentBackend.PINATA, api_key="k", api_secret="s")
    )
    assert isinstance(pinata, PinataContentStore)
    pinata.close()
