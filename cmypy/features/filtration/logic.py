import math
import numpy as np
from numba import njit, prange  # type: ignore
from typing import Optional
from cmypy.domain.models import FilterSetting, FilterDelta
from cmypy.domain.types import PixelBuffer, Gains
from cmypy.domain.constants import CHANNELS_PER_PIXEL
from cmypy.features.filtration.models import FiltrationConfig
from cmypy.kernel.image.validation import ensure_pixel_buffer, ensure_matching_buffers
from cmypy.kernel.system.performance import time_function


def calculate_delta(base: FilterSetting, target: FilterSetting) -> FilterDelta:
    """
    Difference between the target and the base filter pack, per channel.
    """
    return FilterDelta(
        c=target.c - base.c,
        m=target.m - base.m,
        y=target.y - base.y,
    )


def format_value(value: float) -> float:
    """
    Rounds to the nearest 0.1 for display, ties toward +infinity
    (12.34 -> 12.3, 0.25 -> 0.3, -0.25 -> -0.2, -0.05 -> 0.0).
    """
    return math.floor(value * 10.0 + 0.5) / 10.0


def format_signed(value: float) -> str:
    """
    Delta readout: '+5', '-2.5', '0'. The sign follows the raw value, so a
    small positive delta reads '+0'.
    """
    rounded = format_value(value)
    text = str(int(rounded)) if rounded.is_integer() else str(rounded)
    if value > 0:
        return f"+{text}"
    return text


def compute_gains(delta: FilterDelta, config: FiltrationConfig) -> Gains:
    """
    Maps filtration deltas onto light-channel gains.

    Filtration is complementary to the light it blocks: in negative-to-positive
    printing more yellow holds back blue exposure and the print turns bluer,
    magenta -> greener, cyan -> redder.
    """
    gain_r = delta.c * config.strength
    gain_g = delta.m * config.strength
    gain_b = delta.y * config.strength
    return (gain_r, gain_g, gain_b)


@njit(cache=True)
def _to_sample(val: float) -> float:
    # Clamp, then round half to even (8-bit clamped store)
    if not val > 0.0:
        return 0.0
    if val >= 255.0:
        return 255.0
    return np.rint(val)


@njit(parallel=True, cache=True)
def _apply_filtration_jit(
    src: np.ndarray,
    dst: np.ndarray,
    gain_r: float,
    gain_g: float,
    gain_b: float,
    xtalk: float,
) -> None:
    """
    Gain plus crosstalk matrix over a flat (N, 4) RGBA buffer. Alpha is copied.
    """
    n = src.shape[0]
    for i in prange(n):
        r = np.float64(src[i, 0])
        g = np.float64(src[i, 1])
        b = np.float64(src[i, 2])

        new_r = r + gain_r - gain_g * xtalk - gain_b * xtalk
        new_g = g + gain_g - gain_r * xtalk - gain_b * xtalk
        new_b = b + gain_b - gain_r * xtalk - gain_g * xtalk

        dst[i, 0] = np.uint8(_to_sample(new_r))
        dst[i, 1] = np.uint8(_to_sample(new_g))
        dst[i, 2] = np.uint8(_to_sample(new_b))
        dst[i, 3] = src[i, 3]


@time_function
def apply_filtration(
    source: PixelBuffer,
    delta: FilterDelta,
    config: Optional[FiltrationConfig] = None,
    out: Optional[PixelBuffer] = None,
) -> PixelBuffer:
    """
    Renders the effect of a filtration change on an RGBA8 buffer, either
    (H, W, 4) or a flat row-major run of W*H*4 samples. The result keeps
    the caller's shape.

    The source is only read. The result goes to `out` when given (same shape,
    C-contiguous, not aliasing the source), otherwise to a new buffer.
    Every pixel depends only on its own samples and the shared delta.
    """
    source = ensure_pixel_buffer(source, allow_flat=True)
    cfg = config or FiltrationConfig()

    if out is None:
        out = np.empty(source.shape, dtype=np.uint8)
    else:
        out = ensure_pixel_buffer(out, allow_flat=True)
        ensure_matching_buffers(source, out)
        if not out.flags["C_CONTIGUOUS"]:
            raise ValueError("Destination buffer must be C-contiguous")

    gain_r, gain_g, gain_b = compute_gains(delta, cfg)

    src_flat = np.ascontiguousarray(source).reshape(-1, CHANNELS_PER_PIXEL)
    dst_flat = out.reshape(-1, CHANNELS_PER_PIXEL)
    _apply_filtration_jit(
        src_flat,
        dst_flat,
        float(gain_r),
        float(gain_g),
        float(gain_b),
        float(cfg.crosstalk),
    )
    return out
