# khata_pos/utils/vision.py
"""
Client for the image classification service used by visual product search.

The service receives a base64 JPEG and answers with the probable part type
and brand. This app only needs a best guess, so every failure (no endpoint
configured, network error, bad JSON, missing fields) is logged and turned
into None.
"""
from __future__ import annotations

import logging
from typing import Optional

import httpx

from .. import config

_log = logging.getLogger(__name__)

_PROMPT = (
    "Identify this refrigeration or washing machine spare part. "
    "Provide the probable Part Type and Brand. Respond in JSON format."
)


class VisionClient:
    def __init__(
        self,
        url: str = config.VISION_URL,
        api_key: str = config.VISION_API_KEY,
        timeout: float = config.VISION_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.url = (url or "").strip()
        self.api_key = api_key
        self._client = httpx.Client(timeout=timeout, transport=transport)

    @property
    def available(self) -> bool:
        return bool(self.url)

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def analyze(self, image_b64: str) -> Optional[dict]:
        """Return {'partType': str, 'brand': str} or None."""
        if not self.available or not image_b64:
            return None
        payload = {"image": image_b64, "mimeType": "image/jpeg", "prompt": _PROMPT}
        try:
            resp = self._client.post(self.url, json=payload, headers=self._headers())
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            _log.error("Image analysis failed: %s", exc)
            return None
        if not isinstance(data, dict):
            _log.error("Image analysis returned %s, expected an object", type(data).__name__)
            return None
        part_type = str(data.get("partType") or "").strip()
        brand = str(data.get("brand") or "").strip()
        if not part_type and not brand:
            return None
        return {"partType": part_type, "brand": brand}

    def close(self) -> None:
        self._client.close()
