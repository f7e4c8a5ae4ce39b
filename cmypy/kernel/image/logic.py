import hashlib
import os
import uuid
from typing import Tuple
import cv2
import numpy as np
from cmypy.domain.types import PixelBuffer, Dimensions
from cmypy.kernel.image.validation import ensure_array, ensure_pixel_buffer


def calculate_file_hash(file_path: str) -> str:
    """
    Generates a fast fingerprint of an image file.
    Hashes the first 1MB, last 1MB, and total file size.
    """
    try:
        file_size = os.path.getsize(file_path)
        hasher = hashlib.sha256()
        hasher.update(str(file_size).encode())

        with open(file_path, "rb") as f:
            hasher.update(f.read(1024 * 1024))

            if file_size > 2 * 1024 * 1024:
                f.seek(-1024 * 1024, os.SEEK_END)
                hasher.update(f.read(1024 * 1024))

        return hasher.hexdigest()
    except OSError:
        return f"err_{uuid.uuid4()}"


def ensure_rgba(img: np.ndarray) -> PixelBuffer:
    """
    Promotes grayscale (H, W), (H, W, 1) or RGB (H, W, 3) uint8 data to RGBA
    with an opaque alpha channel. RGBA input is returned as-is.
    """
    img = ensure_array(img)
    if img.dtype != np.uint8:
        raise ValueError(f"Expected uint8 image data, got {img.dtype}")

    if img.ndim == 3 and img.shape[2] == 1:
        img = img[..., 0]
    if img.ndim == 2:
        img = np.stack([img] * 3, axis=-1)
    if img.ndim == 3 and img.shape[2] == 3:
        h, w = img.shape[:2]
        alpha = np.full((h, w, 1), 255, dtype=np.uint8)
        img = np.concatenate([img, alpha], axis=-1)

    return ensure_pixel_buffer(img)


def fit_within(size: Dimensions, max_size: int) -> Dimensions:
    """
    Scales (H, W) so the longest side is at most max_size, keeping aspect ratio.
    Dimensions are truncated like a canvas resize, never below 1px.
    """
    h, w = size
    longest = max(h, w)
    if longest <= max_size:
        return (h, w)

    scale = max_size / longest
    return (max(1, int(h * scale)), max(1, int(w * scale)))


def downscale_to_fit(buffer: PixelBuffer, max_size: int) -> PixelBuffer:
    buffer = ensure_pixel_buffer(buffer)
    h, w = buffer.shape[:2]
    target_h, target_w = fit_within((h, w), max_size)
    if (target_h, target_w) == (h, w):
        return buffer

    # INTER_AREA for downsampling to minimize aliasing
    resized = cv2.resize(buffer, (target_w, target_h), interpolation=cv2.INTER_AREA)
    return ensure_pixel_buffer(np.ascontiguousarray(resized))


def rgba_to_rgb(buffer: PixelBuffer) -> np.ndarray:
    """
    Drops alpha for formats that cannot carry it (JPEG).
    """
    return np.ascontiguousarray(ensure_pixel_buffer(buffer)[..., :3])


def buffer_dimensions(buffer: PixelBuffer) -> Tuple[int, int]:
    h, w = buffer.shape[:2]
    return (int(h), int(w))
