"""Value types shared by the caching and connectivity layers."""

from __future__ import annotations

import io
import re
from dataclasses import dataclass
from enum import Enum

from PIL import Image, UnidentifiedImageError

from imagelink.config import IMAGES_DIR_NAME, THUMBNAILS_DIR_NAME
from imagelink.errors import DecodeError

_SIZE_PATTERN = re.compile(r"^\s*(\d+)\s*[xX×]\s*(\d+)\s*$")
_DECODE_ERRORS = (
    UnidentifiedImageError,
    OSError,
    SyntaxError,
    ValueError,
    Image.DecompressionBombError,
)


class CacheNamespace(str, Enum):
    """On-disk namespaces; the value is the directory name."""

    IMAGES = IMAGES_DIR_NAME
    THUMBNAILS = THUMBNAILS_DIR_NAME


class ConnectivityState(Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class TransportType(Enum):
    WIFI = "wifi"
    CELLULAR = "cellular"
    WIRED = "wired"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ConnectivitySnapshot:
    state: ConnectivityState = ConnectivityState.DISCONNECTED
    transport: TransportType = TransportType.UNKNOWN

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectivityState.CONNECTED


@dataclass(frozen=True)
class Size:
    """Pixel dimensions of a requested thumbnail."""

    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Size must be positive, got {self.width}x{self.height}")

    @classmethod
    def parse(cls, text: str) -> "Size":
        """Parse ``"256x256"`` style strings."""
        match = _SIZE_PATTERN.match(text)
        if match is None:
            raise ValueError(f"Invalid size {text!r}; expected WIDTHxHEIGHT")
        return cls(int(match.group(1)), int(match.group(2)))

    def as_tuple(self) -> tuple[int, int]:
        return (self.width, self.height)

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class CachedImage:
    """A decoded image together with the cache key it is stored under.

    Only the decoded image lives in the memory tier; :meth:`encode` produces
    the JPEG form written to disk.  JPEG has no alpha channel, so transparency
    is flattened away on every disk round-trip.
    """

    key: str
    image: Image.Image

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self) -> Size:
        return Size(self.image.width, self.image.height)

    @classmethod
    def decode(cls, key: str, data: bytes) -> "CachedImage":
        """Decode *data* with Pillow, raising :class:`DecodeError` on failure."""
        if not data:
            raise DecodeError("Empty image data")
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                decoded = img.copy()
        except _DECODE_ERRORS as exc:
            raise DecodeError(f"Invalid image data: {exc}") from exc
        return cls(key=key, image=decoded)

    def encode(self, quality: int) -> bytes:
        img = self.image
        if img.mode != "RGB":
            img = img.convert("RGB")
        buffer = io.BytesIO()
        img.save(buffer, format="JPEG", quality=quality)
        return buffer.getvalue()
