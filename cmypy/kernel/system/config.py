import os
from dataclasses import dataclass
from typing import Dict, Any
from cmypy.domain.models import FilterSetting


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


# User dir env (cache, perf stats)
BASE_USER_DIR = os.path.abspath(
    os.getenv("CMYPY_USER_DIR", os.path.join(os.path.expanduser("~"), ".cmypy"))
)


@dataclass
class AppConfig:
    preview_render_size: int
    nudge_step: float
    cache_dir: str
    perf_logging: bool


# Global application constants
APP_CONFIG = AppConfig(
    preview_render_size=1200,  # Longest side of the cached working image
    nudge_step=1.0,  # +/- buttons
    cache_dir=os.path.join(BASE_USER_DIR, "cache"),
    perf_logging=_env_flag("CMYPY_PERF_LOG"),
)

# Empirical "visual feel" calibration of the enlarger model, not measured dye data.
FILTRATION_CONSTANTS: Dict[str, Any] = {
    "strength": 1.8,  # RGB levels per filtration unit
    "crosstalk": 0.15,  # Fraction of a channel's gain suppressing the other two
}

# Typical colour-negative starting pack on a dichroic head
DEFAULT_FILTER_SETTING = FilterSetting(c=0.0, m=50.0, y=50.0)
