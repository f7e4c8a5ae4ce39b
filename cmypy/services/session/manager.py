from dataclasses import dataclass, field
from typing import Optional
from cmypy.domain.models import Channel, EditMode, FilterDelta, FilterSetting
from cmypy.features.filtration.logic import calculate_delta
from cmypy.features.filtration.models import FiltrationConfig
from cmypy.services.rendering.scheduler import DisplaySink, RenderScheduler, RenderTask
from cmypy.services.rendering.source import SourceImage
from cmypy.kernel.system.config import APP_CONFIG, DEFAULT_FILTER_SETTING
from cmypy.kernel.system.logging import get_logger

logger = get_logger("session")


@dataclass
class AppState:
    """
    Editing state for the loaded print: the pack used for the test print (base),
    the pack being dialled in (target) and which of the two the controls drive.
    """

    base: FilterSetting = DEFAULT_FILTER_SETTING
    target: FilterSetting = DEFAULT_FILTER_SETTING
    edit_mode: EditMode = EditMode.EDITING_TARGET
    show_original: bool = False
    source: Optional[SourceImage] = None
    config: FiltrationConfig = field(default_factory=FiltrationConfig)


class SessionManager:
    """
    Owns the editing state and turns every visible change into a render request.
    """

    def __init__(
        self,
        sink: DisplaySink,
        config: Optional[FiltrationConfig] = None,
    ):
        self.state = AppState(config=config or FiltrationConfig())
        self.scheduler = RenderScheduler(sink)

    @property
    def delta(self) -> FilterDelta:
        return calculate_delta(self.state.base, self.state.target)

    @property
    def active_setting(self) -> FilterSetting:
        if self.state.edit_mode == EditMode.EDITING_BASE:
            return self.state.base
        return self.state.target

    def load_image(self, source: SourceImage) -> None:
        """
        Replaces the working image. The user starts by entering the pack the
        test print was made with.
        """
        self.scheduler.discard_pending()
        self.state.source = source
        self.state.show_original = False
        self.state.edit_mode = EditMode.EDITING_BASE
        logger.info(f"Session image: {source.name} ({source.width}x{source.height})")
        self.request_render()

    def set_edit_mode(self, mode: EditMode) -> None:
        self.state.edit_mode = mode

    def set_channel(self, channel: Channel, value: float) -> None:
        """
        While the base is being entered the target tracks it, so the delta on
        that channel stays zero until the user switches to adjusting.
        """
        previous = self.delta
        if self.state.edit_mode == EditMode.EDITING_BASE:
            self.state.base = self.state.base.with_channel(channel, value)
            self.state.target = self.state.target.with_channel(channel, value)
        else:
            self.state.target = self.state.target.with_channel(channel, value)

        if self.delta != previous:
            self.request_render()

    def nudge(self, channel: Channel, direction: int) -> None:
        step = APP_CONFIG.nudge_step if direction >= 0 else -APP_CONFIG.nudge_step
        self.set_channel(channel, self.active_setting.get(channel) + step)

    def reset_target(self) -> None:
        previous = self.delta
        self.state.target = self.state.base
        if self.delta != previous:
            self.request_render()

    def update_config(self, config: FiltrationConfig) -> None:
        self.state.config = config
        self.request_render()

    def hold_compare(self) -> None:
        if not self.state.show_original:
            self.state.show_original = True
            self.request_render()

    def release_compare(self) -> None:
        if self.state.show_original:
            self.state.show_original = False
            self.request_render()

    def render_task(self) -> Optional[RenderTask]:
        if self.state.source is None:
            return None
        return RenderTask(
            source=self.state.source,
            delta=self.delta,
            show_original=self.state.show_original,
            config=self.state.config,
        )

    def request_render(self) -> None:
        task = self.render_task()
        if task is None:
            return
        self.scheduler.request_render(task)
