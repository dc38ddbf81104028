"""ImageEncoder — turns an image source into a transport-ready EncodedImage."""
import asyncio
import base64
import logging
import mimetypes
from abc import ABC, abstractmethod
from pathlib import Path

from quiz2json.constants import FALLBACK_MIME_TYPE
from quiz2json.errors import ReadError
from quiz2json.models import EncodedImage

logger = logging.getLogger(__name__)


class ImageSource(ABC):
    """An opaque binary image with a known MIME type."""

    mime_type: str

    @abstractmethod
    async def read(self) -> bytes:
        """Return the full byte content. Raises OSError or ReadError on failure."""
        ...


class InMemoryImage(ImageSource):

    def __init__(self, data: bytes, mime_type: str) -> None:
        self._data = data
        self.mime_type = mime_type

    async def read(self) -> bytes:
        return self._data


class FileImage(ImageSource):

    def __init__(self, path: str | Path, mime_type: str | None = None) -> None:
        self._path = Path(path)
        self.mime_type = mime_type or _guess_mime_type(self._path)

    async def read(self) -> bytes:
        return await asyncio.to_thread(self._path.read_bytes)


def _guess_mime_type(path: Path) -> str:
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or FALLBACK_MIME_TYPE


async def encode(source: ImageSource) -> EncodedImage:
    """Read *source* and base64 it. Content is forwarded as-is, never inspected."""
    try:
        data = await source.read()
    except OSError as exc:
        raise ReadError(f"Could not read image: {exc}") from exc
    logger.debug("Encoded %d bytes (%s)", len(data), source.mime_type)
    return EncodedImage(
        data=base64.standard_b64encode(data).decode("ascii"),
        mime_type=source.mime_type,
    )
