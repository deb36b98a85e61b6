"""Image re-encoding for vision prompts.

Photos arrive in whatever format the client captured (PNG, HEIC exports,
WebP...). The vision prompt always inlines JPEG, so everything is converted
here first.
"""

import io
import logging

from PIL import Image

from inside.domain.analysis.exceptions.domain_errors import (
    GatewayError,
    GatewayErrorKind,
)

logger = logging.getLogger(__name__)

JPEG_QUALITY = 80


def encode_jpeg(image_data: bytes, quality: int = JPEG_QUALITY) -> bytes:
    """
    Convert any readable image to JPEG bytes.

    Transparent images are flattened onto a white background.

    Raises:
        GatewayError: IMAGE_ENCODING_FAILURE if the bytes are empty or not a
            readable image
    """
    if not image_data:
        raise GatewayError(GatewayErrorKind.IMAGE_ENCODING_FAILURE, "Image is empty")

    try:
        img: Image.Image = Image.open(io.BytesIO(image_data))
        img.load()

        rgb_img: Image.Image
        if img.mode in ("RGBA", "LA", "P"):
            background = Image.new("RGB", img.size, (255, 255, 255))
            if img.mode != "RGBA":
                img = img.convert("RGBA")
            background.paste(img, mask=img.split()[-1])
            rgb_img = background
        elif img.mode != "RGB":
            rgb_img = img.convert("RGB")
        else:
            rgb_img = img

        output = io.BytesIO()
        rgb_img.save(output, format="JPEG", quality=quality, optimize=True)
        return output.getvalue()
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        logger.error(
            "Error converting image to JPEG",
            extra={"error": str(exc), "size_bytes": len(image_data)},
        )
        raise GatewayError(
            GatewayErrorKind.IMAGE_ENCODING_FAILURE,
            "Invalid image format or corrupted file",
        ) from exc
