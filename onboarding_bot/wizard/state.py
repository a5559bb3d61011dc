"""
Wizard State — the multi-step form state machine.

Tracks:
- Current step index (always within the registry's bounds)
- Per-step completion flags
- Form data accumulated across all steps (shallow merge, never replaced)
- Step enter/exit lifecycle callbacks
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from types import MappingProxyType
from typing import Any

from .registry import StepDescriptor, StepRegistry

logger = logging.getLogger(__name__)

StepCallback = Callable[[str], None]


class WizardState:
    """
    State machine for one wizard instance.

    All navigation is bounds-checked: out-of-range requests are ignored and
    reported by a ``False`` return value, never by an exception. Jump
    permissions ("only completed or visited steps") are the indicator's
    policy, not enforced here.
    """

    def __init__(
        self,
        steps: StepRegistry | Sequence[StepDescriptor],
        initial_data: Mapping[str, Any] | None = None,
    ):
        self._steps = steps if isinstance(steps, StepRegistry) else StepRegistry(steps)
        self._current_index = 0
        self._completed: dict[str, bool] = {}
        self._form_data: dict[str, Any] = dict(initial_data or {})
        self._enter_callbacks: list[StepCallback] = []
        self._exit_callbacks: list[StepCallback] = []

    # =========================================================================
    # Read accessors
    # =========================================================================

    @property
    def steps(self) -> StepRegistry:
        return self._steps

    @property
    def current_step_index(self) -> int:
        return self._current_index

    @property
    def current_step(self) -> StepDescriptor:
        return self._steps[self._current_index]

    @property
    def is_first_step(self) -> bool:
        return self._current_index == 0

    @property
    def is_last_step(self) -> bool:
        return self._current_index == len(self._steps) - 1

    @property
    def form_data(self) -> Mapping[str, Any]:
        """Read-only view; mutate through ``update_form_data``."""
        return MappingProxyType(self._form_data)

    @property
    def completed_steps(self) -> dict[str, bool]:
        return dict(self._completed)

    # =========================================================================
    # Navigation
    # =========================================================================

    def go_to_next_step(self) -> bool:
        """Advance one step. No-op at the last step."""
        if self.is_last_step:
            logger.debug("Cannot go next: already at last step (%s)", self._current_index)
            return False
        return self._navigate_to(self._current_index + 1)

    def go_to_previous_step(self) -> bool:
        """Go back one step. No-op at the first step."""
        if self.is_first_step:
            logger.debug("Cannot go previous: already at first step (%s)", self._current_index)
            return False
        return self._navigate_to(self._current_index - 1)

    def go_to_step(self, index: int) -> bool:
        """Jump to ``index`` if it is within bounds; otherwise no-op."""
        if not 0 <= index < len(self._steps):
            logger.debug("Ignoring jump to out-of-range step %s", index)
            return False
        if index == self._current_index:
            return False
        return self._navigate_to(index)

    def _navigate_to(self, new_index: int) -> bool:
        old_step = self.current_step
        self._current_index = new_index
        new_step = self.current_step
        logger.info("Wizard step %s → %s", old_step.id, new_step.id)

        self._fire(self._exit_callbacks, old_step.id)
        self._fire(self._enter_callbacks, new_step.id)
        return True

    # =========================================================================
    # Completion tracking
    # =========================================================================

    def mark_step_complete(self, step_id: str) -> None:
        """Flag a step complete. Unknown ids are recorded as-is."""
        self._completed[step_id] = True

    def mark_step_incomplete(self, step_id: str) -> None:
        self._completed[step_id] = False

    def is_step_complete(self, step_id: str) -> bool:
        return self._completed.get(step_id, False)

    # =========================================================================
    # Form data
    # =========================================================================

    def update_form_data(self, partial: Mapping[str, Any]) -> None:
        """
        Shallow-merge ``partial`` into the accumulated form data.

        Keys present in ``partial`` overwrite unconditionally, including with
        None. Keys absent from ``partial`` are left untouched.
        """
        self._form_data.update(partial)

    # =========================================================================
    # Lifecycle callbacks
    # =========================================================================

    def on_step_enter(self, callback: StepCallback) -> None:
        """Register ``callback(step_id)`` to run after a step becomes current."""
        self._enter_callbacks.append(callback)

    def on_step_exit(self, callback: StepCallback) -> None:
        """Register ``callback(step_id)`` to run when a step stops being current."""
        self._exit_callbacks.append(callback)

    def _fire(self, callbacks: list[StepCallback], step_id: str) -> None:
        for callback in callbacks:
            try:
                callback(step_id)
            except Exception:
                logger.exception("Step lifecycle callback failed for step %s", step_id)

    def to_dict(self) -> dict[str, Any]:
        """Snapshot for logging and summaries."""
        return {
            "current_step_index": self._current_index,
            "current_step": self.current_step.id,
            "completed_steps": dict(self._completed),
            "form_data": dict(self._form_data),
        }
