from dataclasses import dataclass, replace, asdict
from enum import Enum, auto
from typing import Dict, Any, Tuple
from cmypy.domain.constants import MIN_FILTRATION, MAX_FILTRATION


class Channel(Enum):
    """
    Filtration channels of a subtractive (CMY) enlarger head.
    """

    C = "c"
    M = "m"
    Y = "y"


class EditMode(Enum):
    """
    Which of the two settings the controls currently mutate.
    """

    EDITING_BASE = auto()
    EDITING_TARGET = auto()


def clamp_filtration(value: float) -> float:
    return float(min(MAX_FILTRATION, max(MIN_FILTRATION, value)))


@dataclass(frozen=True)
class FilterSetting:
    """
    Dial values of the enlarger head, in filtration units.
    """

    c: float = 0.0
    m: float = 0.0
    y: float = 0.0

    @classmethod
    def clamped(cls, c: float, m: float, y: float) -> "FilterSetting":
        return cls(
            c=clamp_filtration(c),
            m=clamp_filtration(m),
            y=clamp_filtration(y),
        )

    def get(self, channel: Channel) -> float:
        return float(getattr(self, channel.value))

    def with_channel(self, channel: Channel, value: float) -> "FilterSetting":
        """
        Returns a copy with one channel replaced, clamped to the dial range.
        """
        return replace(self, **{channel.value: clamp_filtration(value)})

    def nudge(self, channel: Channel, step: float) -> "FilterSetting":
        return self.with_channel(channel, self.get(channel) + step)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.c, self.m, self.y)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilterSetting":
        return cls.clamped(
            float(data.get("c", 0.0)),
            float(data.get("m", 0.0)),
            float(data.get("y", 0.0)),
        )


@dataclass(frozen=True)
class FilterDelta:
    """
    Signed change between two settings. Always derived, never clamped.
    """

    c: float = 0.0
    m: float = 0.0
    y: float = 0.0

    @classmethod
    def zero(cls) -> "FilterDelta":
        return cls(0.0, 0.0, 0.0)

    @property
    def is_zero(self) -> bool:
        return self.c == 0.0 and self.m == 0.0 and self.y == 0.0

    def get(self, channel: Channel) -> float:
        return float(getattr(self, channel.value))

    def scaled(self, factor: float) -> "FilterDelta":
        return FilterDelta(self.c * factor, self.m * factor, self.y * factor)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.c, self.m, self.y)
