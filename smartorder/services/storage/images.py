"""Product image storage."""
import base64
import binascii
import logging
import mimetypes
import re
import time
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import NamedTuple, Optional

logger = logging.getLogger(__name__)

DATA_URI_PATTERN = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<payload>[A-Za-z0-9+/=\s]+)$"
)


class DataUri(NamedTuple):
    """Decoded data URI."""

    mime_type: str
    data: bytes


def parse_data_uri(data_uri: str) -> DataUri:
    """Decode a `data:<mime>;base64,<payload>` URI.

    Raises:
        ValueError: if the URI has no MIME type or is not valid base64.
    """
    match = DATA_URI_PATTERN.match(data_uri.strip())
    if not match:
        raise ValueError("Image must be a base64 data URI with a MIME type")
    try:
        data = base64.b64decode(match.group("payload"), validate=False)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 image payload: {e}") from e
    return DataUri(mime_type=match.group("mime"), data=data)


class ImageStorage(ABC):
    """Abstract base class for product image storage."""

    @abstractmethod
    async def save(self, data_uri: str, filename: Optional[str] = None) -> str:
        """Store an image and return its public URL."""
        pass

    @abstractmethod
    async def delete(self, url: str) -> bool:
        """Delete a stored image. Returns False if it was not found."""
        pass


class LocalImageStorage(ImageStorage):
    """Stores images in a local directory served under `base_url`."""

    def __init__(self, directory: str, base_url: str = "/media"):
        self.directory = Path(directory)
        self.base_url = base_url.rstrip("/")

    def _build_name(self, mime_type: str, filename: Optional[str]) -> str:
        extension = mimetypes.guess_extension(mime_type) or ".bin"
        stem = re.sub(r"\s+", "_", Path(filename).stem) if filename else uuid.uuid4().hex
        return f"{int(time.time() * 1000)}_{stem}{extension}"

    async def save(self, data_uri: str, filename: Optional[str] = None) -> str:
        image = parse_data_uri(data_uri)
        products_dir = self.directory / "products"
        products_dir.mkdir(parents=True, exist_ok=True)
        name = self._build_name(image.mime_type, filename)
        (products_dir / name).write_bytes(image.data)
        logger.info(f"[STORAGE] Saved product image {name} ({len(image.data)} bytes)")
        return f"{self.base_url}/products/{name}"

    async def delete(self, url: str) -> bool:
        prefix = f"{self.base_url}/"
        if not url.startswith(prefix):
            # Placeholders and external URLs are not ours to delete
            return False
        path = self.directory / url[len(prefix):]
        if not path.exists():
            logger.warning(f"[STORAGE] Image not found, skipping deletion: {url}")
            return False
        path.unlink()
        logger.info(f"[STORAGE] Deleted product image {url}")
        return True
