import logging

from PIL import Image

from imagelink.models.types import CachedImage, Size

LOGGER = logging.getLogger(__name__)


class ThumbnailDeriver:
    """Aspect-fill thumbnails with Pillow.

    The source is scaled so that it covers the requested box
    (``max(width_ratio, height_ratio)``), then the overflow is cropped evenly
    from both sides.  Sources smaller than the box in both dimensions are
    returned as-is; they are never upscaled.
    """

    def __init__(self, resample: Image.Resampling = Image.Resampling.LANCZOS):
        self._resample = resample

    def derive(self, source: CachedImage, size: Size) -> CachedImage:
        key = f"{source.key}_{size}"
        src_w, src_h = source.image.size
        if src_w < size.width and src_h < size.height:
            return CachedImage(key=key, image=source.image)
        return CachedImage(key=key, image=self._fill(source.image, size))

    def _fill(self, image: Image.Image, size: Size) -> Image.Image:
        src_w, src_h = image.size
        scale = max(size.width / src_w, size.height / src_h)
        # The crop box is computed in source pixels so only the target canvas is allocated.
        box_w = size.width / scale
        box_h = size.height / scale
        left = (src_w - box_w) / 2
        top = (src_h - box_h) / 2

        if image.mode not in ("RGB", "RGBA"):
            image = image.convert("RGBA" if "A" in image.getbands() else "RGB")
        LOGGER.debug(
            "Thumbnail %dx%d -> %s (scale %.4f, crop box %.1f,%.1f %.1fx%.1f)",
            src_w, src_h, size, scale, left, top, box_w, box_h,
        )
        return image.resize(
            size.as_tuple(),
            self._resample,
            box=(left, top, left + box_w, top + box_h),
        )
