import io
from enum import Enum
import tifffile
from PIL import Image
from cmypy.domain.types import PixelBuffer
from cmypy.kernel.image.logic import rgba_to_rgb
from cmypy.kernel.image.validation import ensure_pixel_buffer


class ExportFormat(str, Enum):
    JPEG = "JPEG"
    PNG = "PNG"
    TIFF = "TIFF"


FILE_EXTENSIONS = {
    ExportFormat.JPEG: "jpg",
    ExportFormat.PNG: "png",
    ExportFormat.TIFF: "tiff",
}


def encode_export(buffer: PixelBuffer, export_fmt: ExportFormat) -> bytes:
    """
    Encodes a rendered RGBA8 buffer. JPEG drops alpha.
    """
    buffer = ensure_pixel_buffer(buffer)
    output_buf = io.BytesIO()

    if export_fmt == ExportFormat.TIFF:
        tifffile.imwrite(
            output_buf,
            buffer,
            photometric="rgb",
            compression="zlib",
        )
    elif export_fmt == ExportFormat.PNG:
        Image.fromarray(buffer).save(output_buf, format="PNG")
    else:
        Image.fromarray(rgba_to_rgb(buffer)).save(
            output_buf, format="JPEG", quality=95
        )

    return output_buf.getvalue()
