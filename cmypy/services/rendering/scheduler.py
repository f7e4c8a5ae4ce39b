from dataclasses import dataclass, field
from typing import Callable, Optional
from cmypy.domain.models import FilterDelta
from cmypy.domain.types import PixelBuffer
from cmypy.features.filtration.models import FiltrationConfig
from cmypy.features.filtration.processor import FiltrationProcessor
from cmypy.services.rendering.source import SourceImage
from cmypy.kernel.system.logging import get_logger

logger = get_logger("render")


@dataclass(frozen=True, eq=False)
class RenderTask:
    """
    Request parameters for a single render pass.
    """

    source: SourceImage
    delta: FilterDelta
    show_original: bool = False
    config: FiltrationConfig = field(default_factory=FiltrationConfig)


def render(task: RenderTask) -> PixelBuffer:
    """
    Compare mode hands back the cached original untouched; anything else is a
    fresh transform of it.
    """
    if task.show_original:
        return task.source.buffer
    return FiltrationProcessor(task.config).process(task.source.buffer, task.delta)


DisplaySink = Callable[[PixelBuffer, RenderTask], None]


class RenderScheduler:
    """
    Coalesces render requests into a single pending slot, drained once per
    display frame. A newer request replaces an older one that has not been
    rendered yet; stale work is dropped, never queued.
    """

    def __init__(
        self,
        sink: DisplaySink,
        renderer: Callable[[RenderTask], PixelBuffer] = render,
    ):
        self._sink = sink
        self._renderer = renderer
        self._pending_render_task: Optional[RenderTask] = None
        self._is_rendering = False
        self.frames_rendered = 0
        self.superseded = 0

    @property
    def has_pending(self) -> bool:
        return self._pending_render_task is not None

    @property
    def is_rendering(self) -> bool:
        return self._is_rendering

    def request_render(self, task: RenderTask) -> None:
        if self._pending_render_task is not None:
            self.superseded += 1
            logger.debug("Superseding pending render")
        self._pending_render_task = task

    def discard_pending(self) -> None:
        self._pending_render_task = None

    def on_frame(self) -> bool:
        """
        Display refresh tick. Renders the pending task, if any, and pushes it to
        the sink. Requests made while rendering wait for the next frame.
        """
        if self._is_rendering or self._pending_render_task is None:
            return False

        task = self._pending_render_task
        self._pending_render_task = None
        self._is_rendering = True
        try:
            result = self._renderer(task)
            self._sink(result, task)
        finally:
            self._is_rendering = False

        self.frames_rendered += 1
        return True
