# Enlarger head dial range, in filtration units (CC)
MIN_FILTRATION: float = 0.0
MAX_FILTRATION: float = 200.0

# Samples per pixel in a PixelBuffer (R, G, B, A)
CHANNELS_PER_PIXEL: int = 4
