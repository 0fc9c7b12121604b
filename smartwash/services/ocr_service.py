# smartwash/services/ocr_service.py
"""
Licence-plate OCR via a generative model.

Input:  a data URI  'data:<mimetype>;base64,<payload>'
Output: the plate in uppercase with no spaces or punctuation, or "" when the
        model cannot read it. "" is a soft failure (ask for manual entry);
        transport and API failures raise OcrError.

Endpoint: POST {OCR_API_BASE}/models/{OCR_MODEL}:generateContent
"""

import re
from abc import ABC, abstractmethod
from typing import Optional, Tuple

import httpx

from smartwash.config import settings
from smartwash.exceptions import InvalidImageError, OcrError
from smartwash.utils.json_parser import get_nested, safe_parse_json
from smartwash.utils.logger import get_logger

logger = get_logger(__name__)

_DATA_URI = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>[A-Za-z0-9+/=\s]+)$")
_NON_PLATE_CHARS = re.compile(r"[^A-Z0-9]")

PLATE_PROMPT = (
    "You are an expert at reading license plates from images, even if they are blurry or at an angle.\n"
    "Analyze the following image and extract the license plate number.\n"
    "Return only the license plate text. It should be uppercase and contain no spaces or special characters.\n"
    "If you cannot determine the license plate, return an empty string for the licensePlate field."
)

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {"licensePlate": {"type": "STRING"}},
    "required": ["licensePlate"],
}


def parse_data_uri(photo_data_uri: str) -> Tuple[str, str]:
    """Split a base64 data URI into (mime_type, payload). Raises InvalidImageError."""
    match = _DATA_URI.match((photo_data_uri or "").strip())
    if not match:
        raise InvalidImageError("Image must be a base64 data URI: data:<mimetype>;base64,<data>")
    if not match.group("mime").startswith("image/"):
        raise InvalidImageError(f"Unsupported media type: {match.group('mime')}")
    return match.group("mime"), re.sub(r"\s+", "", match.group("data"))


def clean_plate_text(raw: Optional[str]) -> str:
    return _NON_PLATE_CHARS.sub("", (raw or "").upper())


def extract_plate(payload: dict) -> str:
    """Pull licensePlate out of a generateContent response. "" when absent."""
    parts = get_nested(payload, "candidates", 0, "content", "parts", default=[]) or []
    text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
    if not text:
        logger.warning("[OCR] Model returned no text")
        return ""
    parsed = safe_parse_json(text)
    if isinstance(parsed, dict):
        return clean_plate_text(parsed.get("licensePlate"))
    logger.warning(f"[OCR] Model output is not the expected JSON: {text[:80]!r}")
    return ""


class PlateScanner(ABC):

    @abstractmethod
    async def scan(self, photo_data_uri: str) -> str:
        """Return the plate read from the image, or "" if it could not be read."""


class GeminiPlateScanner(PlateScanner):

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None,
                 api_base: Optional[str] = None, timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self._api_key = api_key if api_key is not None else settings.OCR_API_KEY
        self._model = model or settings.OCR_MODEL
        self._api_base = (api_base or settings.OCR_API_BASE).rstrip("/")
        self._timeout = timeout or settings.OCR_TIMEOUT_SECONDS
        self._transport = transport

    async def scan(self, photo_data_uri: str) -> str:
        mime_type, data = parse_data_uri(photo_data_uri)
        if not self._api_key:
            raise OcrError("Plate scanning is not configured (OCR_API_KEY missing)")

        url = f"{self._api_base}/models/{self._model}:generateContent"
        body = {
            "contents": [{
                "parts": [
                    {"text": PLATE_PROMPT},
                    {"inline_data": {"mime_type": mime_type, "data": data}},
                ],
            }],
            "generationConfig": {
                "response_mime_type": "application/json",
                "response_schema": RESPONSE_SCHEMA,
            },
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, json=body, headers={"x-goog-api-key": self._api_key})
        except httpx.HTTPError as e:
            logger.error(f"[OCR] Request to {self._model} failed: {e}")
            raise OcrError(f"Plate scan request failed: {e}") from e

        if response.status_code != 200:
            logger.warning(f"[OCR] {self._model} returned HTTP {response.status_code}")
            raise OcrError(f"Plate scan returned HTTP {response.status_code}")

        payload = safe_parse_json(response.content)
        if not isinstance(payload, dict):
            raise OcrError("Plate scan returned a non-JSON body")
        plate = extract_plate(payload)
        logger.info(f"[OCR] Read plate {plate!r} ({len(data)} bytes of {mime_type})")
        return plate
