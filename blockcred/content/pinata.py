"""
Pinata Content Store: IPFS Pinning over HTTPS
================================================

Pins certificate artifacts to IPFS through Pinata's pinning API.

Endpoints used:
    POST /pinning/pinFileToIPFS   multipart: file, pinataMetadata, pinataOptions
    POST /pinning/pinJSONToIPFS   JSON: {pinataContent, pinataMetadata, pinataOptions}

Both return ``{"IpfsHash": "...", "PinSize": 123, "Timestamp": "..."}``.
Errors come back as ``{"error": {"reason": "...", "details": "..."}}``
(or occasionally a bare string) and are surfaced as UpstreamError.

Usage
-----
    store = PinataContentStore(api_key="...", api_secret="...")
    cid = store.upload(pdf_bytes, "degree.pdf", {"student_id": "S1"})
    url = store.file_url(cid)
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import httpx

from blockcred.content.base import ContentStore, PinResult
from blockcred.errors import UpstreamError
from blockcred.hashing import canonical_json

logger = logging.getLogger("blockcred.content.pinata")

PIN_FILE_PATH = "/pinning/pinFileToIPFS"
PIN_JSON_PATH = "/pinning/pinJSONToIPFS"


class PinataContentStore(ContentStore):
    """
    Content store backed by the Pinata pinning service.

    Args:
        api_key: Pinata API key.
        api_secret: Pinata API secret.
        api_url: API base URL.
        gateway_url: Public gateway prefix for content URLs.
        cid_version: CID version requested in ``pinataOptions``.
        timeout: HTTP timeout in seconds.
        transport: Optional httpx transport (tests inject a MockTransport).
    """

    def __init__(
        self,
        api_key: Optional[str],
        api_secret: Optional[str],
        api_url: str = "https://api.pinata.cloud",
        gateway_url: str = "https://gateway.pinata.cloud/ipfs/",
        cid_version: int = 1,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        super().__init__(gateway_url=gateway_url)
        self.api_key = api_key or ""
        self.api_secret = api_secret or ""
        self.cid_version = cid_version
        self._client = httpx.Client(base_url=api_url, timeout=timeout, transport=transport)

    @classmethod
    def from_config(cls, config) -> "PinataContentStore":
        """Build from a ContentStoreConfig."""
        return cls(
            api_key=config.api_key,
            api_secret=config.api_secret,
            api_url=config.api_url,
            gateway_url=config.gateway_url,
            cid_version=config.cid_version,
            timeout=config.request_timeout,
        )

    # ── Helpers ────────────────────────────────────────────────

    def _require_credentials(self) -> None:
        if not self.api_key or not self.api_secret:
            raise UpstreamError(
                "Pinata API credentials not configured - set "
                "BLOCKCRED_CONTENT__API_KEY and BLOCKCRED_CONTENT__API_SECRET"
            )

    def _auth_headers(self) -> dict[str, str]:
        return {
            "pinata_api_key": self.api_key,
            "pinata_secret_api_key": self.api_secret,
        }

    def _options(self) -> dict[str, Any]:
        return {"cidVersion": self.cid_version}

    @staticmethod
    def _keyvalues(metadata: dict[str, Any]) -> dict[str, Any]:
        """Pinata keyvalues accept strings and numbers only."""
        out: dict[str, Any] = {}
        for key, value in metadata.items():
            if isinstance(value, bool) or value is None:
                out[key] = str(value).lower()
            elif isinstance(value, (str, int, float)):
                out[key] = value
            else:
                out[key] = json.dumps(value, sort_keys=True, default=str)
        return out

    def _post(self, path: str, **kwargs) -> PinResult:
        headers = {**self._auth_headers(), **kwargs.pop("headers", {})}
        try:
            response = self._client.post(path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise UpstreamError(f"Pinata request to {path} failed: {e}") from e

        if response.status_code != 200:
            raise UpstreamError(self._describe_error(response))

        try:
            body = response.json()
            return PinResult(
                cid=body["IpfsHash"],
                pin_size=int(body.get("PinSize") or 0),
                timestamp=str(body.get("Timestamp") or ""),
            )
        except (ValueError, KeyError, TypeError) as e:
            raise UpstreamError(f"Unexpected Pinata response: {response.text[:200]}") from e

    @staticmethod
    def _describe_error(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return f"Pinata API error (status {response.status_code}): {response.text[:200]}"
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            return f"Pinata API error: {error.get('reason', '')} - {error.get('details', '')}"
        if error:
            return f"Pinata API error (status {response.status_code}): {error}"
        return f"Pinata API error (status {response.status_code}): {response.text[:200]}"

    # ── Public interface ───────────────────────────────────────

    def pin_file(self, data: bytes, filename: str, metadata: dict[str, Any]) -> PinResult:
        self._require_credentials()
        pinata_metadata = {"name": filename, "keyvalues": self._keyvalues(metadata)}
        return self._post(
            PIN_FILE_PATH,
            files={"file": (filename, data)},
            data={
                "pinataMetadata": json.dumps(pinata_metadata),
                "pinataOptions": json.dumps(self._options()),
            },
        )

    def pin_json(self, content: Any, name: str) -> str:
        self._require_credentials()
        payload = canonical_json({
            "pinataContent": content,
            "pinataMetadata": {"name": name},
            "pinataOptions": self._options(),
        })
        result = self._post(
            PIN_JSON_PATH,
            content=payload.encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )
        logger.info(f"Pinned JSON document {name} as {result.cid}")
        return result.cid

    def close(self) -> None:
        self._client.close()
