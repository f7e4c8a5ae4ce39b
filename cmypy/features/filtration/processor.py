from typing import Optional
from cmypy.domain.models import FilterDelta
from cmypy.domain.types import PixelBuffer
from cmypy.features.filtration.models import FiltrationConfig
from cmypy.features.filtration.logic import apply_filtration


class FiltrationProcessor:
    """
    Applies a filtration delta to a cached original buffer.
    """

    def __init__(self, config: Optional[FiltrationConfig] = None):
        self.config = config or FiltrationConfig()

    def process(self, image: PixelBuffer, delta: FilterDelta) -> PixelBuffer:
        return apply_filtration(image, delta, self.config)
