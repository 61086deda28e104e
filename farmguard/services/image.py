import base64
import binascii
import io
import logging
from urllib.parse import urlparse

import httpx
from PIL import Image, UnidentifiedImageError

from farmguard.exceptions import InvalidImageReference, ImageFetchError

logger = logging.getLogger(__name__)


class ImageService:
    """Validates captured image references and resolves them to raw bytes for analysis."""

    DATA_URL_PREFIX = "data:"

    def __init__(self, fetch_timeout: float = 30.0, max_bytes: int = 20 * 1024 * 1024):
        self.fetch_timeout = fetch_timeout
        self.max_bytes = max_bytes

    @staticmethod
    def is_data_url(reference: str) -> bool:
        return reference.startswith(ImageService.DATA_URL_PREFIX)

    @staticmethod
    def sniff_mime_type(image_bytes: bytes) -> str:
        """Open the bytes with Pillow and return the MIME type of the detected format."""
        try:
            with Image.open(io.BytesIO(image_bytes)) as image:
                image.verify()
                return Image.MIME.get(image.format, "image/jpeg")
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise InvalidImageReference(f"embedded data is not a readable image ({e.__class__.__name__})")

    def decode_data_url(self, reference: str) -> tuple[bytes, str]:
        header, sep, payload = reference.partition(",")
        if not sep or not header.startswith("data:image/") or not header.endswith(";base64"):
            raise InvalidImageReference("expected data:image/<type>;base64,<payload>")
        try:
            image_bytes = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError):
            raise InvalidImageReference("embedded data is not valid base64")
        if not image_bytes:
            raise InvalidImageReference("embedded image is empty")
        if len(image_bytes) > self.max_bytes:
            raise InvalidImageReference(f"embedded image exceeds {self.max_bytes} bytes")
        return image_bytes, self.sniff_mime_type(image_bytes)

    def validate_reference(self, reference: str) -> str:
        """Raise InvalidImageReference unless ``reference`` is an http(s) URL or a decodable data URL."""
        if self.is_data_url(reference):
            self.decode_data_url(reference)
            return reference
        parsed = urlparse(reference)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise InvalidImageReference("expected an http(s) URL or a data URL")
        return reference

    async def load(self, reference: str) -> tuple[bytes, str]:
        """Resolve a reference to (bytes, mime_type); raises ImageFetchError."""
        if self.is_data_url(reference):
            try:
                return self.decode_data_url(reference)
            except InvalidImageReference as e:
                raise ImageFetchError(e.detail["message"]) from e

        try:
            async with httpx.AsyncClient(follow_redirects=True) as client:
                resp = await client.get(reference, timeout=self.fetch_timeout)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise ImageFetchError(f"could not download {reference}: {e}") from e

        image_bytes = resp.content
        if not image_bytes or len(image_bytes) > self.max_bytes:
            raise ImageFetchError(f"downloaded image has unusable size ({len(image_bytes)} bytes)")
        mime_type = resp.headers.get("content-type", "").split(";")[0].strip()
        if not mime_type.startswith("image/"):
            try:
                mime_type = self.sniff_mime_type(image_bytes)
            except InvalidImageReference as e:
                raise ImageFetchError(e.detail["message"]) from e
        logger.info(f"📷 Downloaded {len(image_bytes)} bytes ({mime_type}) from {reference}")
        return image_bytes, mime_type
