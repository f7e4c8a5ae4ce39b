from typing import Any, cast
import numpy as np
from cmypy.domain.types import PixelBuffer
from cmypy.domain.constants import CHANNELS_PER_PIXEL


def ensure_array(val: Any) -> np.ndarray:
    """
    Proves to the type checker that a value is a numpy array at runtime.
    """
    if not isinstance(val, np.ndarray):
        raise TypeError(f"Expected numpy.ndarray, got {type(val)}")
    return val


def ensure_pixel_buffer(arr: Any, allow_flat: bool = False) -> PixelBuffer:
    """
    Validates an RGBA8 pixel buffer of shape (H, W, 4).
    With allow_flat, a 1-D row-major buffer of W*H*4 samples is accepted as well.
    Unlike float images, no dtype conversion is attempted: a wrong dtype is a caller bug.
    """
    arr = ensure_array(arr)
    if arr.dtype != np.uint8:
        raise ValueError(f"Expected uint8 pixel buffer, got {arr.dtype}")
    if allow_flat and arr.ndim == 1:
        if arr.size % CHANNELS_PER_PIXEL != 0:
            raise ValueError(f"Flat RGBA buffer length must be a multiple of 4, got {arr.size}")
        return cast(PixelBuffer, arr)
    if arr.ndim != 3 or arr.shape[2] != CHANNELS_PER_PIXEL:
        raise ValueError(f"Expected RGBA buffer of shape (H, W, 4), got {arr.shape}")
    return cast(PixelBuffer, arr)


def ensure_matching_buffers(source: PixelBuffer, destination: PixelBuffer) -> None:
    """
    Destination must be a distinct, writable buffer of the same geometry as source.
    """
    if destination.shape != source.shape:
        raise ValueError(
            f"Buffer size mismatch: source {source.shape}, destination {destination.shape}"
        )
    if not destination.flags.writeable:
        raise ValueError("Destination buffer is read-only")
    if np.shares_memory(source, destination):
        raise ValueError("Destination buffer must not alias the source buffer")
