from dataclasses import dataclass, field
from cmypy.kernel.system.config import FILTRATION_CONSTANTS


@dataclass(frozen=True)
class FiltrationConfig:
    """
    Calibration of the enlarger filtration model.
    """

    # Filtration units -> RGB levels
    strength: float = field(default_factory=lambda: float(FILTRATION_CONSTANTS["strength"]))
    # Share of a channel's gain that suppresses the other two channels
    crosstalk: float = field(default_factory=lambda: float(FILTRATION_CONSTANTS["crosstalk"]))
