from typing import TypeAlias, Tuple
import numpy as np
import numpy.typing as npt

# RGBA, 8 bits per sample, (Height, Width, 4), row-major
PixelBuffer: TypeAlias = npt.NDArray[np.uint8]

# (Height, Width)
Dimensions: TypeAlias = Tuple[int, int]

# (gain_r, gain_g, gain_b) in RGB levels
Gains: TypeAlias = Tuple[float, float, float]
