"""Click qualification and timed highlight-then-revert per province."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from .colors import blend_toward_white
from .config import SelectionConfig
from .models import HighlightState, Province
from .scheduler import Scheduler, TimerHandle

_LOGGER = logging.getLogger("provincemap.selection")


@dataclass(slots=True)
class _HighlightTask:
    province: Province
    state: HighlightState
    handle: TimerHandle | None = None


class SelectionController:
    """Highlight clicked provinces and revert them after a fixed delay.

    Tasks are keyed by province id. `is_alive` is the scene's existence check;
    a revert for a province that is no longer registered does nothing.
    """

    def __init__(
        self,
        cfg: SelectionConfig,
        scheduler: Scheduler,
        is_alive: Callable[[Province], bool],
    ) -> None:
        self.cfg = cfg
        self.scheduler = scheduler
        self.is_alive = is_alive
        self._tasks: dict[int, _HighlightTask] = {}

    @property
    def active_count(self) -> int:
        return len(self._tasks)

    def highlight_state(self, province_id: int) -> HighlightState | None:
        task = self._tasks.get(province_id)
        return task.state if task is not None else None

    def on_click(self, province: Province, is_primary_button: bool, camera_is_panning: bool) -> bool:
        if not is_primary_button or camera_is_panning:
            return False

        previous = self._tasks.pop(province.province_id, None)
        if previous is not None and previous.province is province:
            # Re-arm from the undecorated colour rather than the highlighted one.
            original = previous.state.original_color
            previous.state.active = False
            if previous.handle is not None:
                previous.handle.cancel()
        else:
            original = province.color

        delay_s = self.cfg.highlight_duration_ms / 1000.0
        state = HighlightState(original_color=original, expiry=self.scheduler.now() + delay_s)
        task = _HighlightTask(province=province, state=state)
        self._tasks[province.province_id] = task
        province.color = blend_toward_white(original, self.cfg.highlight_blend)
        task.handle = self.scheduler.call_later(delay_s, lambda: self._revert(task))
        _LOGGER.debug("Highlighted province %d (%s)", province.province_id, province.name)
        return True

    def _revert(self, task: _HighlightTask) -> None:
        province = task.province
        if self._tasks.get(province.province_id) is task:
            del self._tasks[province.province_id]
        if not task.state.active:
            return
        task.state.active = False
        if not self.is_alive(province):
            _LOGGER.debug("Skipping revert for removed province %d", province.province_id)
            return
        province.color = task.state.original_color

    def cancel_all(self) -> None:
        """Drop every pending revert; used when the map is unloaded or reloaded."""
        for task in self._tasks.values():
            task.state.active = False
            if task.handle is not None:
                task.handle.cancel()
        self._tasks.clear()
