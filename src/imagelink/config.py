"""Default configuration values for imagelink."""

from __future__ import annotations

from typing import Final

# The list of image URLs shown in the gallery.  One URL per line.
MANIFEST_URL: Final[str] = "https://it-link.ru/test/images.txt"

# In-memory tiers are bounded by entry count.  Full-resolution images are much
# larger than grid thumbnails, hence the smaller limit.
IMAGE_CACHE_CAPACITY: Final[int] = 100
THUMBNAIL_CACHE_CAPACITY: Final[int] = 200

# Disk entries are JPEG re-encodings.  Originals are kept at maximum quality so
# repeated loads do not visibly degrade; thumbnails trade quality for size.
IMAGE_JPEG_QUALITY: Final[int] = 100
THUMBNAIL_JPEG_QUALITY: Final[int] = 80

DEFAULT_THUMBNAIL_SIZE: Final[tuple[int, int]] = (256, 256)

# Matches the default request timeout of the platform HTTP stacks the gallery
# originally ran on.
REQUEST_TIMEOUT_SEC: Final[float] = 60.0

IMAGES_DIR_NAME: Final[str] = "images"
THUMBNAILS_DIR_NAME: Final[str] = "thumbnails"
APP_DIR_NAME: Final[str] = "imagelink"

IMAGE_EXTENSIONS: Final[frozenset[str]] = frozenset(
    {"jpg", "jpeg", "png", "gif", "webp", "tiff", "bmp"}
)
ALLOWED_SCHEMES: Final[frozenset[str]] = frozenset({"http", "https"})

LOADER_MAX_WORKERS: Final[int] = 4
