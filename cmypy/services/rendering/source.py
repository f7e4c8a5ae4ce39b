import hashlib
import os
from dataclasses import dataclass
import numpy as np
from PIL import Image, ImageOps
from cmypy.domain.types import PixelBuffer, Dimensions
from cmypy.kernel.image.logic import (
    buffer_dimensions,
    calculate_file_hash,
    downscale_to_fit,
    ensure_rgba,
)
from cmypy.kernel.system.config import APP_CONFIG
from cmypy.kernel.system.logging import get_logger

logger = get_logger("source")


def _freeze(buffer: PixelBuffer) -> PixelBuffer:
    frozen = np.ascontiguousarray(buffer).copy()
    frozen.flags.writeable = False
    return frozen


@dataclass(frozen=True, eq=False)
class SourceImage:
    """
    The decoded working image: written once at load, read by every render after.
    The pixel buffer is a private read-only copy.
    """

    name: str
    file_hash: str
    buffer: PixelBuffer
    original_size: Dimensions

    @property
    def height(self) -> int:
        return buffer_dimensions(self.buffer)[0]

    @property
    def width(self) -> int:
        return buffer_dimensions(self.buffer)[1]

    @classmethod
    def from_array(
        cls,
        array: np.ndarray,
        name: str = "untitled",
        max_size: int | None = None,
    ) -> "SourceImage":
        rgba = ensure_rgba(array)
        original_size = buffer_dimensions(rgba)
        if max_size:
            rgba = downscale_to_fit(rgba, max_size)

        return cls(
            name=name,
            file_hash=hashlib.sha256(rgba.tobytes()).hexdigest(),
            buffer=_freeze(rgba),
            original_size=original_size,
        )

    @classmethod
    def from_file(
        cls, file_path: str, max_size: int | None = APP_CONFIG.preview_render_size
    ) -> "SourceImage":
        """
        Decodes an image file to RGBA8, honouring EXIF orientation, and
        downscales it so the longest side fits max_size (None keeps full size).
        """
        with Image.open(file_path) as img:
            img = ImageOps.exif_transpose(img)
            rgba = ensure_rgba(np.asarray(img.convert("RGBA")))

        original_size = buffer_dimensions(rgba)
        if max_size:
            rgba = downscale_to_fit(rgba, max_size)

        source = cls(
            name=os.path.splitext(os.path.basename(file_path))[0],
            file_hash=calculate_file_hash(file_path),
            buffer=_freeze(rgba),
            original_size=original_size,
        )
        logger.info(
            f"Loaded {source.name}: {original_size[1]}x{original_size[0]} "
            f"-> working {source.width}x{source.height}"
        )
        return source
